from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
import json
import logging

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

from .websockets.connection_manager import ConnectionManager
from .services.game_service import GameService
from .services.settings_manager import SettingsManager
from .routes import game_routes, settings_routes

STATE_REQUEST_TOPIC = "getState"


def create_app(
    settings_manager: Optional[SettingsManager] = None,
    game_service: Optional[GameService] = None,
) -> FastAPI:
    """Build the web app; pass collaborators in to replace the defaults (tests do)."""
    app = FastAPI(title="Guess Duel")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if game_service is not None:
        connection_manager = game_service.connection_manager
        settings_manager = game_service.settings_manager
    else:
        connection_manager = ConnectionManager()
        settings_manager = settings_manager or SettingsManager()
        game_service = GameService(connection_manager, settings_manager)

    # Store in app state for access in routes
    app.state.connection_manager = connection_manager
    app.state.settings_manager = settings_manager
    app.state.game_service = game_service

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        client_id = await connection_manager.connect(websocket)
        try:
            await game_service.send_game_state(websocket)

            while True:
                message = await websocket.receive_text()
                try:
                    data = json.loads(message)
                except json.JSONDecodeError as e:
                    logger.error(f"Failed to decode WebSocket message: {e}")
                    continue

                topic = data.get('topic') if isinstance(data, dict) else None
                if topic == STATE_REQUEST_TOPIC:
                    await game_service.send_game_state(websocket)
                else:
                    logger.warning(f"Unhandled message topic from {client_id}: {topic}")

        except WebSocketDisconnect:
            await connection_manager.disconnect(websocket)
        except Exception as e:
            logger.error(f"Error in WebSocket connection: {e}")
            await connection_manager.disconnect(websocket)

    app.include_router(game_routes.router)
    app.include_router(settings_routes.router)
    return app


app = create_app()

# Run with: uvicorn guess_duel.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("guess_duel.main:app", host="0.0.0.0", port=8000, reload=True)
