import base64
import io
import os
from types import SimpleNamespace
from unittest.mock import AsyncMock

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from PIL import Image

from spinecheck.config import Settings

KEY_ENV_VARS = [
    "VITE_GEMINI_API_KEY", "VITE_API_KEY", "REACT_APP_GEMINI_API_KEY", "NEXT_PUBLIC_GEMINI_API_KEY",
    "GEMINI_API_KEY", "API_KEY", "GOOGLE_API_KEY", "OPENAI_API_KEY",
    "VITE_EMAILJS_PUBLIC_KEY", "EMAILJS_PUBLIC_KEY", "EMAILJS_USER_ID",
    "VITE_EMAILJS_SERVICE_ID", "EMAILJS_SERVICE_ID",
    "VITE_EMAILJS_TEMPLATE_ID", "EMAILJS_TEMPLATE_ID",
]

TEST_KEY = "AIzaSyTESTKEY1234"


def make_settings(**overrides) -> Settings:
    values = {
        "build_api_key": "",
        "api_key": "",
        "emailjs_public_key": "",
        "emailjs_service_id": "",
        "emailjs_template_id": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_image_bytes(width: int, height: int, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    color = (120, 90, 60, 255) if mode == "RGBA" else (120, 90, 60)
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


def decoded_size(b64: str) -> tuple[int, int]:
    with Image.open(io.BytesIO(base64.b64decode(b64))) as image:
        return image.size


def chat_response(content: str | None, finish_reason: str = "stop"):
    message = SimpleNamespace(content=content, refusal=None)
    return SimpleNamespace(choices=[SimpleNamespace(finish_reason=finish_reason, message=message)])


class FakeOpenAI:
    """Stands in for AsyncOpenAI; records the request kwargs."""

    def __init__(self, response=None, error: Exception | None = None):
        self.create = AsyncMock(return_value=response, side_effect=error)
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self.create))

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in KEY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def storage():
    from spinecheck.storage import MemoryStorage
    return MemoryStorage()


@pytest.fixture
def test_settings():
    return make_settings()


@pytest.fixture
def state():
    from spinecheck.state import AppState
    return AppState()


@pytest.fixture
def app_overrides(storage, test_settings, state):
    """Point the app at in-memory storage, test settings and fresh state."""
    from spinecheck.dependencies import get_settings, get_state, get_storage
    from spinecheck.main import app

    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_state] = lambda: state
    yield app
    app.dependency_overrides.clear()
