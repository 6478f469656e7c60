from enum import Enum

from pydantic import BaseModel, Field

from .player import PlayerPhase, PlayerState


class ResultType(str, Enum):
    BOTH_WON_P1_BETTER = "both_won_p1_better"
    BOTH_WON_P2_BETTER = "both_won_p2_better"
    BOTH_WON_TIE = "both_won_tie"
    P1_WINS = "p1_wins"
    P2_WINS = "p2_wins"
    DRAW = "draw"


class PlayerSummary(BaseModel):
    state: PlayerPhase
    secret_name: str
    questions_used: int

    @classmethod
    def from_player(cls, player: PlayerState) -> "PlayerSummary":
        return cls(
            state=player.state,
            secret_name=player.secret_name,
            questions_used=player.questions_used,
        )


class MatchResult(BaseModel):
    result_type: ResultType
    winner_num: int = Field(ge=0, le=2)  # 0 means nobody won outright
    player1: PlayerSummary
    player2: PlayerSummary

    @classmethod
    def from_players(cls, player1: PlayerState, player2: PlayerState) -> "MatchResult":
        """Resolve the match from two terminal players."""
        p1_won = player1.state == PlayerPhase.WON
        p2_won = player2.state == PlayerPhase.WON

        if p1_won and p2_won:
            # Both found their person: fewer questions wins
            if player1.questions_used < player2.questions_used:
                result_type, winner_num = ResultType.BOTH_WON_P1_BETTER, 1
            elif player2.questions_used < player1.questions_used:
                result_type, winner_num = ResultType.BOTH_WON_P2_BETTER, 2
            else:
                result_type, winner_num = ResultType.BOTH_WON_TIE, 0
        elif p1_won:
            result_type, winner_num = ResultType.P1_WINS, 1
        elif p2_won:
            result_type, winner_num = ResultType.P2_WINS, 2
        else:
            result_type, winner_num = ResultType.DRAW, 0

        return cls(
            result_type=result_type,
            winner_num=winner_num,
            player1=PlayerSummary.from_player(player1),
            player2=PlayerSummary.from_player(player2),
        )
