from fastapi import APIRouter, Depends

from spinecheck.config import Settings
from spinecheck.dependencies import get_credentials, get_settings
from spinecheck.schemas.settings import ApiKeyUpdate, SettingsResponse
from spinecheck.services.credentials import CredentialResolver
from spinecheck.utils.response import success_response

router = APIRouter(prefix="/settings", tags=["settings"])


def _settings_data(credentials: CredentialResolver, settings: Settings) -> dict:
    return SettingsResponse(
        environment_key_detected=credentials.environment_key_detected(),
        saved_key=credentials.masked(),
        model=settings.ai_model,
    ).model_dump()


@router.get("")
async def get_app_settings(
    settings: Settings = Depends(get_settings),
    credentials: CredentialResolver = Depends(get_credentials),
):
    return success_response(data=_settings_data(credentials, settings))


@router.put("/api-key")
async def save_api_key(
    payload: ApiKeyUpdate,
    settings: Settings = Depends(get_settings),
    credentials: CredentialResolver = Depends(get_credentials),
):
    credentials.save(payload.api_key)
    return success_response(data=_settings_data(credentials, settings), message="API 키가 저장되었습니다.")


@router.delete("/api-key")
async def delete_api_key(
    settings: Settings = Depends(get_settings),
    credentials: CredentialResolver = Depends(get_credentials),
):
    credentials.clear()
    return success_response(data=_settings_data(credentials, settings), message="저장된 API 키가 삭제되었습니다.")
