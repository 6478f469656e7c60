import unittest

from pydantic import TypeAdapter

from guess_duel.models.player import PlayerPhase, PlayerState
from guess_duel.models.question import GuessRecord, HintRecord, QuestionRecord, RecordKind
from guess_duel.services.events import EventNotifier, GameEvent, GameEventType


class EventNotifierTest(unittest.TestCase):

    def setUp(self):
        self.notifier = EventNotifier()

    def test_handlers_receive_events_in_order(self):
        received = []
        self.notifier.subscribe(GameEventType.PLAYER_WON, lambda e: received.append(("won", e.player_num)))
        self.notifier.subscribe_all(lambda e: received.append(("all", e.type)))

        self.notifier.emit(GameEvent(GameEventType.PLAYER_WON, player_num=1))
        self.notifier.emit(GameEvent(GameEventType.STATE_CHANGE))

        self.assertEqual(received, [
            ("won", 1),
            ("all", GameEventType.PLAYER_WON),
            ("all", GameEventType.STATE_CHANGE),
        ])

    def test_failing_handler_does_not_stop_delivery(self):
        received = []

        def broken(event):
            raise RuntimeError("boom")

        self.notifier.subscribe(GameEventType.GAME_OVER, broken)
        self.notifier.subscribe(GameEventType.GAME_OVER, received.append)

        with self.assertLogs("guess_duel.services.events", level="ERROR"):
            self.notifier.emit(GameEvent(GameEventType.GAME_OVER))
        self.assertEqual(len(received), 1)

    def test_unsubscribe(self):
        received = []
        self.notifier.subscribe(GameEventType.PLAYER_GAVE_UP, received.append)
        self.notifier.subscribe_all(received.append)
        self.notifier.unsubscribe(GameEventType.PLAYER_GAVE_UP, received.append)
        self.notifier.unsubscribe(None, received.append)

        self.notifier.emit(GameEvent(GameEventType.PLAYER_GAVE_UP, player_num=2))
        self.assertEqual(received, [])

    def test_subscribing_twice_delivers_once(self):
        received = []
        self.notifier.subscribe(GameEventType.STATE_CHANGE, received.append)
        self.notifier.subscribe(GameEventType.STATE_CHANGE, received.append)
        self.notifier.emit(GameEvent(GameEventType.STATE_CHANGE))
        self.assertEqual(len(received), 1)

    def test_player_event_message(self):
        event = GameEvent(GameEventType.PLAYER_EXHAUSTED, player_num=1)
        self.assertEqual(event.to_message(), {"playerNum": 1})
        self.assertEqual(event.type.value, "playerExhausted")


class QuestionRecordTest(unittest.TestCase):

    def test_records_are_tagged_by_kind(self):
        adapter = TypeAdapter(QuestionRecord)
        record = adapter.validate_python({"kind": "guess", "index": 2, "text": "李白", "result": False})
        self.assertIsInstance(record, GuessRecord)
        self.assertFalse(record.result)

        hint = adapter.validate_python({"kind": "hint", "index": 3, "text": "终极提示：诗仙"})
        self.assertIsInstance(hint, HintRecord)
        self.assertFalse(hasattr(hint, "result"))

    def test_player_state_serializes_questions_used(self):
        player = PlayerState(
            secret_name="李白",
            state=PlayerPhase.PLAYING,
            questions=[GuessRecord(index=1, text="杜甫", result=False)],
        )
        data = player.model_dump(mode="json")
        self.assertEqual(data["questions_used"], 1)
        self.assertEqual(data["questions"][0]["kind"], RecordKind.GUESS.value)


if __name__ == "__main__":
    unittest.main()
