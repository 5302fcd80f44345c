import json
import logging
import os
import re
from datetime import datetime

from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    AuthenticationError,
    BadRequestError,
    OpenAIError,
    PermissionDeniedError,
    RateLimitError,
)
from pydantic import ValidationError

from spinecheck.config import settings
from spinecheck.schemas.analysis import (
    INCONCLUSIVE_ANGLE,
    AnalysisResult,
    Classification,
    ModelVerdict,
    PreparedImage,
)
from spinecheck.utils.exceptions import (
    AppException,
    AuthFailure,
    BadInput,
    ContentPolicyBlock,
    EmptyResponse,
    RateLimited,
    SchemaViolation,
    TransportError,
)

logger = logging.getLogger(__name__)

PROMPT_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), "prompts", "cobb_analysis.txt")

RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "cobbAngle": {
            "type": "number",
            "description": "The calculated Cobb angle in degrees, rounded to one decimal place; -1 when inconclusive.",
        },
        "classification": {
            "type": "string",
            "enum": [c.value for c in Classification],
            "description": "Classification of the condition: 'Normal', 'Mild', 'High-Risk' or 'Inconclusive'.",
        },
    },
    "required": ["cobbAngle", "classification"],
    "additionalProperties": False,
}

_SAFETY_CODES = {"content_filter", "content_policy_violation", "safety", "prohibited_content"}
_KEY_PATTERN = re.compile(r"(AIza[0-9A-Za-z_-]{6,}|sk-[A-Za-z0-9_-]+)")


def _load_prompt() -> str:
    with open(PROMPT_PATH, encoding="utf-8") as f:
        return f.read()


def _mask_secrets(text: str) -> str:
    return _KEY_PATTERN.sub("***", text)


def _build_api_kwargs(model: str, image: PreparedImage) -> dict:
    content: list[dict] = [
        {"type": "image_url", "image_url": {"url": image.data_url()}},
        {"type": "text", "text": _load_prompt()},
    ]
    return {
        "model": model,
        "messages": [{"role": "user", "content": content}],
        "response_format": {
            "type": "json_schema",
            "json_schema": {"name": "cobb_analysis", "strict": True, "schema": RESPONSE_SCHEMA},
        },
        "temperature": 0.1,
    }


def classify_error(exc: Exception) -> AppException:
    """Map an SDK exception onto the analysis error taxonomy."""
    if isinstance(exc, RateLimitError):
        return RateLimited()
    if isinstance(exc, (AuthenticationError, PermissionDeniedError)):
        return AuthFailure()
    if isinstance(exc, BadRequestError):
        if (getattr(exc, "code", None) or "").lower() in _SAFETY_CODES:
            return ContentPolicyBlock()
        return BadInput()
    if isinstance(exc, APIStatusError):
        if exc.status_code == 429:
            return RateLimited()
        if exc.status_code in (401, 403):
            return AuthFailure()
        if exc.status_code == 400:
            return BadInput()
    if isinstance(exc, APIConnectionError):
        return TransportError("AI 서버에 연결할 수 없습니다. 네트워크 상태를 확인해주세요.")
    return TransportError()


def parse_verdict(raw_text: str | None, captured_at: str | None = None) -> AnalysisResult:
    """Parse the model's JSON payload into an AnalysisResult."""
    if not raw_text or not raw_text.strip():
        raise EmptyResponse()

    try:
        verdict = ModelVerdict.model_validate(json.loads(raw_text))
        classification = Classification.parse(verdict.classification)
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        logger.warning("Model response did not match schema: %s", raw_text[:200])
        raise SchemaViolation() from e

    angle = round(verdict.cobbAngle, 1)
    if classification is Classification.INCONCLUSIVE:
        angle = INCONCLUSIVE_ANGLE
    elif angle < 0:
        logger.warning("Negative angle %s with classification %s", angle, classification.value)
        raise SchemaViolation()

    return AnalysisResult(
        cobb_angle=angle,
        classification=classification,
        captured_at=captured_at or datetime.now().strftime("%Y-%m-%d"),
    )


async def analyze(
    image: PreparedImage,
    credential: str,
    model: str | None = None,
    base_url: str | None = None,
) -> AnalysisResult:
    """Send one prepared image to the model and return its verdict."""
    model = model or settings.ai_model
    base_url = base_url or settings.ai_base_url
    api_kwargs = _build_api_kwargs(model, image)
    logger.info("Analysis request: model=%s, image=%sx%s", model, image.width, image.height)

    try:
        async with AsyncOpenAI(api_key=credential, base_url=base_url, max_retries=0) as client:
            response = await client.chat.completions.create(**api_kwargs)
    except OpenAIError as e:
        error = classify_error(e)
        logger.warning("Analysis call failed (%s): %s", error.code, _mask_secrets(str(e)))
        raise error from e

    if not response.choices:
        raise EmptyResponse()

    choice = response.choices[0]
    if choice.finish_reason == "content_filter" or getattr(choice.message, "refusal", None):
        logger.warning("Analysis blocked by safety filter (finish_reason=%s)", choice.finish_reason)
        raise ContentPolicyBlock()

    raw_text = choice.message.content or ""
    logger.info("Model raw response (%d chars): %s", len(raw_text), raw_text[:200])

    result = parse_verdict(raw_text)
    logger.info("Analysis result: angle=%s classification=%s", result.cobb_angle, result.classification.value)
    return result
