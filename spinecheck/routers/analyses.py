import logging

from fastapi import APIRouter, Depends, File, UploadFile

from spinecheck.config import Settings
from spinecheck.dependencies import get_credentials, get_history, get_settings, get_state
from spinecheck.schemas.analysis import AnalysisResult
from spinecheck.services import ai_service
from spinecheck.services.credentials import CredentialResolver
from spinecheck.services.history import HistoryStore
from spinecheck.services.image_preparer import prepare_upload
from spinecheck.services.interpreter import format_angle, interpret
from spinecheck.state import AppState
from spinecheck.utils.exceptions import AppException
from spinecheck.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyses", tags=["analyses"])


def result_payload(result: AnalysisResult, lang: str = "ko") -> dict:
    interpretation = interpret(result.classification.value, lang)
    return {
        **result.model_dump(mode="json", by_alias=True),
        "angle_display": format_angle(result),
        "tier": interpretation.tier,
        "text_key": interpretation.text_key,
        "text": interpretation.text,
    }


@router.post("", status_code=201)
async def create_analysis(
    file: UploadFile = File(...),
    lang: str = "ko",
    settings: Settings = Depends(get_settings),
    credentials: CredentialResolver = Depends(get_credentials),
    history: HistoryStore = Depends(get_history),
    state: AppState = Depends(get_state),
):
    async with state.analysis_slot():
        credential = credentials.require()
        image = await prepare_upload(file)
        try:
            result = await ai_service.analyze(
                image, credential, model=settings.ai_model, base_url=settings.ai_base_url
            )
        except AppException:
            raise
        except Exception as e:
            logger.exception("Unexpected failure during analysis of %s", file.filename)
            raise ai_service.classify_error(e) from e

    history.append(result)
    state.last_result = result
    return success_response(data=result_payload(result, lang))


@router.get("/current")
async def get_current_analysis(lang: str = "ko", state: AppState = Depends(get_state)):
    if state.last_result is None:
        return success_response(data=None)
    return success_response(data=result_payload(state.last_result, lang))


@router.delete("/current")
async def reset_analysis(state: AppState = Depends(get_state)):
    state.reset()
    return success_response(message="초기화되었습니다.")
