from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class GameEventType(str, Enum):
    """Every notification a game session can send."""
    STATE_CHANGE = "stateChange"
    PLAYER_WON = "playerWon"
    PLAYER_GAVE_UP = "playerGaveUp"
    PLAYER_EXHAUSTED = "playerExhausted"
    GAME_OVER = "gameOver"


@dataclass(frozen=True)
class GameEvent:
    """One notification.

    ``player_num`` is set for the per-player events; ``payload`` carries the
    public state (stateChange), the match result (gameOver) or the revealed
    secret name (playerGaveUp).
    """
    type: GameEventType
    player_num: Optional[int] = None
    payload: Any = None

    def to_message(self) -> Dict[str, Any]:
        """Wire form: {"playerNum": ...} or the serialized state/result."""
        if self.type in (GameEventType.STATE_CHANGE, GameEventType.GAME_OVER):
            return self.payload.model_dump(mode="json") if self.payload is not None else {}
        message: Dict[str, Any] = {"playerNum": self.player_num}
        if self.type == GameEventType.PLAYER_GAVE_UP and self.payload:
            message["secretName"] = self.payload
        return message


Handler = Callable[[GameEvent], Any]


class EventNotifier:
    """Synchronous observer channel for game session events.

    Handlers run in subscription order inside the emitting call, so observers
    see events in exactly the order the session produced them.
    """

    def __init__(self) -> None:
        self._handlers: Dict[GameEventType, List[Handler]] = {}
        self._catch_all: List[Handler] = []

    def subscribe(self, event_type: GameEventType, handler: Handler) -> None:
        """Subscribe a handler to one event type.

        Args:
            event_type: Event to listen for.
            handler: Callable receiving the GameEvent.
        """
        handlers = self._handlers.setdefault(GameEventType(event_type), [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Subscribed handler %s to event '%s'", handler, event_type)

    def subscribe_all(self, handler: Handler) -> None:
        """Subscribe a handler to every event type."""
        if handler not in self._catch_all:
            self._catch_all.append(handler)

    def unsubscribe(self, event_type: Optional[GameEventType], handler: Handler) -> None:
        """Unsubscribe a handler; ``event_type=None`` removes a catch-all handler."""
        if event_type is None:
            if handler in self._catch_all:
                self._catch_all.remove(handler)
            return
        handlers = self._handlers.get(GameEventType(event_type))
        if not handlers:
            return
        if handler in handlers:
            handlers.remove(handler)
            logger.debug("Unsubscribed handler %s from event '%s'", handler, event_type)
        if not handlers:
            del self._handlers[GameEventType(event_type)]

    def clear(self) -> None:
        """Remove all handlers (useful in tests)."""
        self._handlers.clear()
        self._catch_all.clear()

    def emit(self, event: GameEvent) -> None:
        """Deliver an event to the handlers of its type, then to catch-all handlers."""
        handlers = list(self._handlers.get(event.type, [])) + list(self._catch_all)
        if not handlers:
            logger.debug("Emitting '%s' with no subscribers", event.type.value)
            return
        logger.debug("Emitting '%s' to %d handlers", event.type.value, len(handlers))
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception("Error in handler %s for event '%s'", handler, event.type.value)
