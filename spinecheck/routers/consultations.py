from fastapi import APIRouter, Depends

from spinecheck.dependencies import get_contact_submitter, get_state
from spinecheck.schemas.contact import ContactRequest
from spinecheck.services.contact_service import ContactSubmitter
from spinecheck.state import AppState
from spinecheck.utils.response import success_response

router = APIRouter(prefix="/consultations", tags=["consultations"])


@router.post("", status_code=201)
async def submit_consultation(
    form: ContactRequest,
    submitter: ContactSubmitter = Depends(get_contact_submitter),
    state: AppState = Depends(get_state),
):
    async with state.submission_slot():
        await submitter.submit(form, state.last_result)
    return success_response(message="상담 신청이 성공적으로 전송되었습니다. 곧 연락드리겠습니다.")
