from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, computed_field

from .question import QuestionRecord


class PlayerPhase(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    WON = "won"
    GAVE_UP = "gave_up"
    EXHAUSTED = "exhausted"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset({PlayerPhase.WON, PlayerPhase.GAVE_UP, PlayerPhase.EXHAUSTED})


class PlayerState(BaseModel):
    secret_name: str = ""
    state: PlayerPhase = PlayerPhase.IDLE
    questions: List[QuestionRecord] = []

    @computed_field
    @property
    def questions_used(self) -> int:
        return len(self.questions)

    def is_revealed(self) -> bool:
        """The secret is shown publicly once the player can no longer act."""
        return self.state.is_terminal


class PublicPlayerState(BaseModel):
    state: PlayerPhase
    questions: List[QuestionRecord]
    questions_used: int
    secret_name: Optional[str] = None

    @classmethod
    def from_player(cls, player: PlayerState) -> "PublicPlayerState":
        return cls(
            state=player.state,
            questions=list(player.questions),
            questions_used=player.questions_used,
            secret_name=player.secret_name if player.is_revealed() else None,
        )
