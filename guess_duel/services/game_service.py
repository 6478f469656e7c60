from typing import List, Optional, Set, Tuple
from contextlib import contextmanager
from fastapi import WebSocket
from pydantic import BaseModel
import asyncio
import logging

from ..ai.judge.evaluator import JudgmentService
from ..ai.name_generation.generator import NameGenerator
from ..exceptions import (
    InvalidInputError,
    PlayerNotPlayingError,
    QuestionBudgetExhausted,
    RequestInProgressError,
)
from ..models.game_state import GameSession, PublicGameState
from ..models.player import PlayerPhase
from ..models.question import RecordKind
from ..utils.name_corpus import NameCorpus
from ..config import names_path
from ..websockets.connection_manager import ConnectionManager
from .events import EventNotifier, GameEvent, GameEventType
from .settings_manager import SettingsManager

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 20
HINT_PREFIX = "终极提示："


class TurnOutcome(BaseModel):
    """What happened to one ask/guess/hint request."""
    accepted: bool  # False when the result arrived for a finished player or an old game
    player_num: int
    kind: RecordKind
    text: str
    result: Optional[bool] = None
    state: PublicGameState


class GameService:
    """
    Runs the guessing duel for the web clients.

    Owns the current GameSession, calls the AI for names and judgments,
    and pushes session events to every connected websocket.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        settings_manager: SettingsManager,
        name_generator: Optional[NameGenerator] = None,
        judgment_service: Optional[JudgmentService] = None,
    ):
        self.connection_manager = connection_manager
        self.settings_manager = settings_manager
        self.name_generator = name_generator or NameGenerator(corpus=NameCorpus.load(names_path()))
        self.judgment_service = judgment_service or JudgmentService()

        self.notifier = EventNotifier()
        self.notifier.subscribe_all(self._collect_event)
        self._pending_events: List[GameEvent] = []
        self._broadcast_lock = asyncio.Lock()

        settings = settings_manager.get()
        self.session = GameSession.idle(
            self.notifier,
            max_questions=settings.max_questions,
            category=settings.category,
        )
        self._in_flight: Set[Tuple[GameSession, int]] = set()
        self._starting = False

    # ---------------- Game lifecycle -----------------

    async def start_new_game(self) -> PublicGameState:
        """Pick two secret names and start a fresh session with the current settings."""
        settings = self.settings_manager.get()
        settings.ensure_playable()
        if self._starting:
            raise RequestInProgressError("A new game is already being prepared")

        self._starting = True
        try:
            name1, name2 = await self.name_generator.generate_pair(
                settings.category, settings.provider_config()
            )
        finally:
            self._starting = False

        self.session = GameSession.start(
            name1,
            name2,
            max_questions=settings.max_questions,
            category=settings.category,
            notifier=self.notifier,
        )
        await self._flush_events()
        return self.session.get_public_state()

    async def restart(self) -> PublicGameState:
        """Abandon the current game; responses still in flight for it are discarded."""
        self.session = self.session.reset()
        await self._flush_events()
        return self.session.get_public_state()

    def get_state(self) -> PublicGameState:
        return self.session.get_public_state()

    def opponent_secret(self, viewer_num: int) -> str:
        """The name the other player is trying to find (each player may peek at it)."""
        if not self.session.started:
            raise PlayerNotPlayingError("No game in progress", viewer_num)
        return self.session.opponent_secret(viewer_num)

    # ---------------- Player actions -----------------

    async def ask(self, player_num: int, text: str) -> TurnOutcome:
        text = self._clean_input(text, player_num)
        session = self.session
        if not session.can_ask_question(player_num):
            self._require_playing(session, player_num)
            raise QuestionBudgetExhausted(
                f"Player {player_num} has used all {session.max_questions} questions, make a guess",
                player_num,
            )

        with self._reserve(session, player_num):
            result = await self.judgment_service.judge_question(
                session.secret_name(player_num), text, self._provider_config()
            )
        return await self._record(session, player_num, text, RecordKind.ASK, result)

    async def guess(self, player_num: int, text: str) -> TurnOutcome:
        text = self._clean_input(text, player_num)
        session = self.session
        self._require_playing(session, player_num)

        with self._reserve(session, player_num):
            result = await self.judgment_service.judge_guess(
                session.secret_name(player_num), text, self._provider_config()
            )
        return await self._record(session, player_num, text, RecordKind.GUESS, result)

    async def hint(self, player_num: int) -> TurnOutcome:
        """Ask the AI for a clue; the clue takes up one question slot."""
        session = self.session
        self._require_playing(session, player_num)

        with self._reserve(session, player_num):
            hint = await self.judgment_service.get_hint(
                session.secret_name(player_num), self._provider_config()
            )
        return await self._record(session, player_num, f"{HINT_PREFIX}{hint}", RecordKind.HINT, None)

    async def give_up(self, player_num: int) -> PublicGameState:
        session = self.session
        self._require_playing(session, player_num)
        session.give_up(player_num)
        await self._flush_events()
        return session.get_public_state()

    # ---------------- Websocket -----------------

    async def send_game_state(self, websocket: WebSocket) -> None:
        """Send the current public state to one client."""
        await self.connection_manager.send_personal_message(
            websocket,
            GameEventType.STATE_CHANGE.value,
            self.get_state().model_dump(mode="json"),
        )

    # ---------------- Helpers -----------------

    def _provider_config(self):
        settings = self.settings_manager.get()
        settings.ensure_playable()
        return settings.provider_config()

    @staticmethod
    def _clean_input(text: Optional[str], player_num: int) -> str:
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("Please enter some text", player_num)
        if len(text) > MAX_INPUT_LENGTH:
            raise InvalidInputError(f"Keep it within {MAX_INPUT_LENGTH} characters", player_num)
        return text

    @staticmethod
    def _require_playing(session: GameSession, player_num: int) -> None:
        player = session.player(player_num)
        if player.state != PlayerPhase.PLAYING:
            raise PlayerNotPlayingError(
                f"Player {player_num} is not playing (state: {player.state.value})", player_num
            )

    @contextmanager
    def _reserve(self, session: GameSession, player_num: int):
        """Allow one judgment request per player at a time."""
        key = (session, player_num)
        if key in self._in_flight:
            raise RequestInProgressError(
                f"Player {player_num} is still waiting for the AI", player_num
            )
        self._in_flight.add(key)
        try:
            yield
        finally:
            self._in_flight.discard(key)

    async def _record(
        self,
        session: GameSession,
        player_num: int,
        text: str,
        kind: RecordKind,
        result: Optional[bool],
    ) -> TurnOutcome:
        if session is not self.session:
            logger.warning(f"Discarding {kind.value} result for player {player_num} from a previous game")
            accepted = False
        else:
            accepted = session.record_event(player_num, text, kind, result)
        await self._flush_events()

        return TurnOutcome(
            accepted=accepted,
            player_num=player_num,
            kind=kind,
            text=text,
            result=result,
            state=self.session.get_public_state(),
        )

    def _collect_event(self, event: GameEvent) -> None:
        self._pending_events.append(event)

    async def _flush_events(self) -> None:
        """Broadcast collected session events in the order they happened."""
        async with self._broadcast_lock:
            while self._pending_events:
                event = self._pending_events.pop(0)
                await self.connection_manager.broadcast_message(event.type.value, event.to_message())
