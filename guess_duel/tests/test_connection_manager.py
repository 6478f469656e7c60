import unittest
from unittest.mock import AsyncMock, MagicMock

from guess_duel.websockets.connection_manager import ConnectionManager


def fake_websocket():
    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    return websocket


class ConnectionManagerTest(unittest.IsolatedAsyncioTestCase):

    async def test_broadcast_reaches_every_client(self):
        manager = ConnectionManager()
        sockets = [fake_websocket(), fake_websocket()]
        for websocket in sockets:
            await manager.connect(websocket)

        await manager.broadcast_message("playerWon", {"playerNum": 1})
        for websocket in sockets:
            websocket.send_json.assert_awaited_once_with({"topic": "playerWon", "payload": {"playerNum": 1}})

    async def test_failed_clients_are_dropped(self):
        manager = ConnectionManager()
        healthy, broken = fake_websocket(), fake_websocket()
        broken.send_json.side_effect = RuntimeError("closed")
        await manager.connect(healthy)
        await manager.connect(broken)

        await manager.broadcast_message("stateChange", {})
        self.assertEqual(list(manager.active_connections.values()), [healthy])

    async def test_disconnect(self):
        manager = ConnectionManager()
        websocket = fake_websocket()
        client_id = await manager.connect(websocket)
        self.assertIn(client_id, manager.active_connections)

        await manager.disconnect(websocket)
        await manager.disconnect(websocket)
        self.assertEqual(manager.active_connections, {})


if __name__ == "__main__":
    unittest.main()
