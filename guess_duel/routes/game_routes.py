from fastapi import APIRouter, HTTPException, Path, Request
from pydantic import BaseModel
from typing import Annotated
import logging

from ..exceptions import GuessDuelError
from .errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/game",
    tags=["game"],
)

PlayerNum = Annotated[int, Path(ge=1, le=2, description="Player number (1 or 2)")]


class TextRequest(BaseModel):
    text: str


@router.get("/state")
async def get_state(request: Request):
    """Public state of the current game; hidden names stay hidden."""
    return request.app.state.game_service.get_state()


@router.post("/start")
async def start_game(request: Request):
    """Pick two secret names and start a new game."""
    logger.info("Starting a new game via API")
    try:
        return await request.app.state.game_service.start_new_game()
    except GuessDuelError as e:
        raise to_http_exception(e) from e


@router.post("/restart")
async def restart_game(request: Request):
    return await request.app.state.game_service.restart()


@router.post("/players/{player_num}/ask")
async def ask_question(request: Request, body: TextRequest, player_num: PlayerNum):
    try:
        return await request.app.state.game_service.ask(player_num, body.text)
    except GuessDuelError as e:
        raise to_http_exception(e) from e


@router.post("/players/{player_num}/guess")
async def make_guess(request: Request, body: TextRequest, player_num: PlayerNum):
    try:
        return await request.app.state.game_service.guess(player_num, body.text)
    except GuessDuelError as e:
        raise to_http_exception(e) from e


@router.post("/players/{player_num}/hint")
async def get_hint(request: Request, player_num: PlayerNum):
    """A clue about the player's secret person; costs one question."""
    try:
        return await request.app.state.game_service.hint(player_num)
    except GuessDuelError as e:
        raise to_http_exception(e) from e


@router.post("/players/{player_num}/give-up")
async def give_up(request: Request, player_num: PlayerNum):
    try:
        return await request.app.state.game_service.give_up(player_num)
    except GuessDuelError as e:
        raise to_http_exception(e) from e


@router.get("/players/{player_num}/opponent-secret")
async def opponent_secret(request: Request, player_num: PlayerNum):
    """The name the other player is looking for."""
    try:
        name = request.app.state.game_service.opponent_secret(player_num)
    except GuessDuelError as e:
        raise to_http_exception(e) from e
    if not name:
        raise HTTPException(status_code=404, detail="No secret name yet")
    return {"playerNum": player_num, "secretName": name}
