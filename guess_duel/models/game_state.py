import logging
from typing import Optional

from pydantic import BaseModel

from ..config import Category
from ..exceptions import GameNotOverError
from ..services.events import EventNotifier, GameEvent, GameEventType
from .player import PlayerPhase, PlayerState, PublicPlayerState
from .question import AskRecord, GuessRecord, HintRecord, RecordKind
from .result import MatchResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTIONS = 12
PLAYER_NUMS = (1, 2)


class PublicGameState(BaseModel):
    """Snapshot safe to show both players: secrets stay hidden until a player is done."""
    started: bool
    max_questions: int
    category: Category
    player1: PublicPlayerState
    player2: PublicPlayerState
    is_game_over: bool
    result: Optional[MatchResult] = None


class GameSession:
    """
    One two-player match: owns both player states and enforces the rules.

    Sessions are values. ``start`` and ``reset`` build new sessions instead of
    mutating a shared one; the caller keeps whichever session is current.
    Every mutation notifies ``notifier`` synchronously.
    """

    def __init__(
        self,
        notifier: Optional[EventNotifier] = None,
        *,
        started: bool = False,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        category: Category = Category.ANY,
        player1: Optional[PlayerState] = None,
        player2: Optional[PlayerState] = None,
    ):
        if max_questions < 1:
            raise ValueError(f"max_questions must be positive, got {max_questions}")
        self.notifier = notifier or EventNotifier()
        self.started = started
        self.max_questions = max_questions
        self.category = Category(category)
        self.player1 = player1 or PlayerState()
        self.player2 = player2 or PlayerState()
        self._game_over_announced = False

    @classmethod
    def idle(cls, notifier: Optional[EventNotifier] = None, **kwargs) -> "GameSession":
        """A session nobody is playing yet."""
        return cls(notifier, **kwargs)

    @classmethod
    def start(
        cls,
        name1: str,
        name2: str,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        category: Category = Category.ANY,
        notifier: Optional[EventNotifier] = None,
    ) -> "GameSession":
        """Begin a match: both players go straight to playing with their secret names."""
        if not name1 or not name2:
            raise ValueError("Both secret names are required to start a session")
        session = cls(
            notifier,
            started=True,
            max_questions=max_questions,
            category=category,
            player1=PlayerState(secret_name=name1, state=PlayerPhase.PLAYING),
            player2=PlayerState(secret_name=name2, state=PlayerPhase.PLAYING),
        )
        logger.info(f"Game started: category={session.category.value} max_questions={max_questions}")
        session._emit_state_change()
        return session

    def reset(self) -> "GameSession":
        """Discard this match and return an idle one with the same rules and observers."""
        fresh = GameSession(
            self.notifier,
            max_questions=self.max_questions,
            category=self.category,
        )
        logger.info("Game reset")
        fresh._emit_state_change()
        return fresh

    # ---------------- Players -----------------

    def player(self, player_num: int) -> PlayerState:
        if player_num == 1:
            return self.player1
        if player_num == 2:
            return self.player2
        raise ValueError(f"Unknown player {player_num}")

    def secret_name(self, player_num: int) -> str:
        """The name this player must discover (for judgment calls only)."""
        return self.player(player_num).secret_name

    def opponent_secret(self, viewer_num: int) -> str:
        """The other player's secret; each player may see their opponent's name."""
        other = 2 if viewer_num == 1 else 1
        self.player(viewer_num)
        return self.player(other).secret_name

    def can_ask_question(self, player_num: int) -> bool:
        player = self.player(player_num)
        return player.state == PlayerPhase.PLAYING and player.questions_used < self.max_questions

    def can_guess(self, player_num: int) -> bool:
        return self.player(player_num).state == PlayerPhase.PLAYING

    # ---------------- Mutations -----------------

    def record_event(
        self,
        player_num: int,
        text: str,
        kind: RecordKind,
        result: Optional[bool] = None,
    ) -> bool:
        """
        Record a judged ask/guess or a received hint for a player.

        Returns False without changing anything unless the player is playing,
        which is how late responses for finished players are dropped.
        """
        kind = RecordKind(kind)
        if kind == RecordKind.HINT and result is not None:
            raise ValueError("Hint records carry no result")
        if kind != RecordKind.HINT and not isinstance(result, bool):
            raise ValueError(f"{kind.value} records need a boolean result")

        player = self.player(player_num)
        if player.state != PlayerPhase.PLAYING:
            logger.warning(f"Ignoring {kind.value} for player {player_num} in state {player.state.value}")
            return False

        index = player.questions_used + 1
        if kind == RecordKind.ASK:
            record = AskRecord(index=index, text=text, result=result)
        elif kind == RecordKind.GUESS:
            record = GuessRecord(index=index, text=text, result=result)
        else:
            record = HintRecord(index=index, text=text)
        player.questions.append(record)

        transition = None
        if kind == RecordKind.GUESS and result:
            player.state = PlayerPhase.WON
            transition = GameEventType.PLAYER_WON
        elif kind == RecordKind.GUESS and player.questions_used >= self.max_questions:
            # Budget spent and the guess missed: out of the game
            player.state = PlayerPhase.EXHAUSTED
            transition = GameEventType.PLAYER_EXHAUSTED

        if transition is not None:
            logger.info(f"Player {player_num} is now {player.state.value} after {player.questions_used} questions")
            self.notifier.emit(GameEvent(transition, player_num=player_num))

        self._after_mutation()
        return True

    def give_up(self, player_num: int) -> bool:
        """Concede; does not use a question slot."""
        player = self.player(player_num)
        if player.state != PlayerPhase.PLAYING:
            logger.warning(f"Player {player_num} cannot give up in state {player.state.value}")
            return False

        player.state = PlayerPhase.GAVE_UP
        logger.info(f"Player {player_num} gave up")
        self.notifier.emit(GameEvent(
            GameEventType.PLAYER_GAVE_UP, player_num=player_num, payload=player.secret_name
        ))
        self._after_mutation()
        return True

    # ---------------- Results -----------------

    def is_game_over(self) -> bool:
        return all(self.player(n).state.is_terminal for n in PLAYER_NUMS)

    def compute_result(self) -> MatchResult:
        if not self.is_game_over():
            raise GameNotOverError("The game is not over yet")
        return MatchResult.from_players(self.player1, self.player2)

    def get_public_state(self) -> PublicGameState:
        game_over = self.is_game_over()
        return PublicGameState(
            started=self.started,
            max_questions=self.max_questions,
            category=self.category,
            player1=PublicPlayerState.from_player(self.player1),
            player2=PublicPlayerState.from_player(self.player2),
            is_game_over=game_over,
            result=self.compute_result() if game_over else None,
        )

    # ---------------- Notifications -----------------

    def _emit_state_change(self) -> None:
        self.notifier.emit(GameEvent(GameEventType.STATE_CHANGE, payload=self.get_public_state()))

    def _after_mutation(self) -> None:
        self._emit_state_change()
        if self.is_game_over() and not self._game_over_announced:
            self._game_over_announced = True
            result = self.compute_result()
            logger.info(f"Game over: {result.result_type.value}, winner={result.winner_num}")
            self.notifier.emit(GameEvent(GameEventType.GAME_OVER, payload=result))
