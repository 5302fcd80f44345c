import json

import httpx
import pytest

from conftest import make_settings
from spinecheck.schemas.analysis import AnalysisResult, Classification
from spinecheck.schemas.contact import ContactRequest
from spinecheck.services.contact_service import ContactSubmitter
from spinecheck.storage import MemoryStorage
from spinecheck.utils.exceptions import EmailServiceUnavailable, SubmissionError

FORM = ContactRequest(
    name="김민준",
    age=16,
    gender="male",
    phone="010-1234-5678",
    email="parent@example.com",
    message="상담 받고 싶습니다.",
)
MILD = AnalysisResult(cobb_angle=14.3, classification=Classification.MILD, captured_at="2026-10-17")

EMAILJS_SETTINGS = {
    "emailjs_public_key": "pub-key",
    "emailjs_service_id": "service_abc",
    "emailjs_template_id": "template_xyz",
}


def _submitter(handler, storage=None, **settings):
    return ContactSubmitter(
        make_settings(**settings),
        storage or MemoryStorage(),
        transport=httpx.MockTransport(handler),
    )


def test_template_params_merge_result():
    params = ContactSubmitter.template_params(FORM, MILD)

    assert params["name"] == "김민준"
    assert params["age"] == "16"
    assert params["gender"] == "male"
    assert params["cobb_angle"] == "14.3"
    assert params["classification"] == "Mild"
    assert set(params) == {"name", "age", "gender", "phone", "email", "message", "cobb_angle", "classification"}


def test_template_params_inconclusive_uses_placeholder():
    inconclusive = AnalysisResult(cobb_angle=-1, classification=Classification.INCONCLUSIVE, captured_at="2026-10-17")

    params = ContactSubmitter.template_params(FORM, inconclusive)

    assert params["cobb_angle"] == "--"
    assert params["classification"] == "Inconclusive"


def test_template_params_without_result():
    params = ContactSubmitter.template_params(FORM, None)

    assert params["cobb_angle"] == ""
    assert params["classification"] == ""


@pytest.mark.asyncio
async def test_submit_posts_to_emailjs():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="OK")

    await _submitter(handler, **EMAILJS_SETTINGS).submit(FORM, MILD)

    assert len(requests) == 1
    body = json.loads(requests[0].content)
    assert body["service_id"] == "service_abc"
    assert body["template_id"] == "template_xyz"
    assert body["user_id"] == "pub-key"
    assert body["template_params"]["cobb_angle"] == "14.3"


@pytest.mark.asyncio
async def test_submit_uses_saved_fallback_ids():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="OK")

    storage = MemoryStorage({
        "emailjs_public_key": "saved-pub",
        "emailjs_service_id": "saved-service",
        "emailjs_template_id": "saved-template",
    })
    await _submitter(handler, storage=storage, emailjs_service_id="env-service").submit(FORM, MILD)

    body = json.loads(requests[0].content)
    assert body["service_id"] == "env-service"
    assert body["user_id"] == "saved-pub"


@pytest.mark.asyncio
async def test_submit_without_configuration():
    def handler(request):
        raise AssertionError("should not be called")

    with pytest.raises(EmailServiceUnavailable):
        await _submitter(handler).submit(FORM, MILD)


@pytest.mark.asyncio
async def test_submit_rejected():
    def handler(request):
        return httpx.Response(400, text="The template ID is invalid")

    with pytest.raises(SubmissionError):
        await _submitter(handler, **EMAILJS_SETTINGS).submit(FORM, MILD)


@pytest.mark.asyncio
async def test_submit_transport_failure():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(SubmissionError):
        await _submitter(handler, **EMAILJS_SETTINGS).submit(FORM, MILD)


def test_contact_request_rejects_unknown_gender():
    with pytest.raises(ValueError):
        ContactRequest(name="a", age=30, gender="unknown", phone="1", email="a@b.co", message="m")
