from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, ValidationError
from typing import Any, Dict, Optional
import logging

from ..config import AI_PROVIDERS, Category, GameSettings
from ..services.settings_manager import SettingsManager

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/settings",
    tags=["settings"],
)


class SettingsUpdate(BaseModel):
    player1_name: Optional[str] = None
    player2_name: Optional[str] = None
    category: Optional[Category] = None
    max_questions: Optional[int] = None
    ai_provider: Optional[str] = None
    api_key: Optional[str] = None


def mask_api_key(api_key: str) -> str:
    if not api_key:
        return ""
    if len(api_key) <= 8:
        return "****"
    return f"{api_key[:4]}****{api_key[-4:]}"


def settings_response(settings: GameSettings) -> Dict[str, Any]:
    """Settings as shown to clients, with the API key masked."""
    data = settings.model_dump(mode="json")
    data["api_key"] = mask_api_key(settings.api_key)
    data["has_api_key"] = settings.has_api_key()
    data["category_label"] = SettingsManager.category_label(settings.category)
    data["providers"] = AI_PROVIDERS
    return data


@router.get("")
async def get_settings(request: Request):
    return settings_response(request.app.state.settings_manager.get())


@router.put("")
async def update_settings(request: Request, body: SettingsUpdate):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    try:
        settings = request.app.state.settings_manager.update(**changes)
    except (ValidationError, ValueError) as e:
        logger.warning(f"Rejected settings update: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e
    return settings_response(settings)


@router.post("/reset")
async def reset_settings(request: Request):
    """Back to defaults; the provider and API key are kept."""
    return settings_response(request.app.state.settings_manager.reset_to_defaults())
