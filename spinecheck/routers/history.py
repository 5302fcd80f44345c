from fastapi import APIRouter, Depends

from spinecheck.dependencies import get_history
from spinecheck.services.history import HistoryStore
from spinecheck.services.interpreter import format_angle, interpret
from spinecheck.utils.response import success_response

router = APIRouter(prefix="/history", tags=["history"])


@router.get("")
async def list_history(lang: str = "ko", history: HistoryStore = Depends(get_history)):
    data = []
    for record in history.records:
        interpretation = interpret(record.classification.value, lang)
        data.append({
            **record.model_dump(mode="json", by_alias=True),
            "angle_display": format_angle(record),
            "tier": interpretation.tier,
        })
    return success_response(data=data)


@router.delete("")
async def clear_history(history: HistoryStore = Depends(get_history)):
    history.clear()
    return success_response(message="기록이 삭제되었습니다.")
