from pydantic import BaseModel


class ApiKeyUpdate(BaseModel):
    api_key: str


class SettingsResponse(BaseModel):
    environment_key_detected: bool
    saved_key: str | None = None
    model: str
