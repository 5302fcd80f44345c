import logging

from spinecheck.config import Settings
from spinecheck.storage import StoragePort
from spinecheck.utils.exceptions import CredentialsMissing, InvalidCredential

logger = logging.getLogger(__name__)

API_KEY_STORAGE_KEY = "gemini_api_key"
MIN_KEY_LENGTH = 10


class ConfigResolver:
    """Resolve one configuration value: environment first, saved value second.

    ``env_values`` are checked in order (build-time injected, then
    server-side); the first non-empty one wins. The storage fallback is
    only consulted when none of them is set.
    """

    def __init__(self, env_values: list[str], storage: StoragePort, storage_key: str):
        self._env_values = env_values
        self._storage = storage
        self.storage_key = storage_key

    def environment_value(self) -> str | None:
        for value in self._env_values:
            if value and value.strip():
                return value.strip()
        return None

    def saved_value(self) -> str | None:
        value = self._storage.get(self.storage_key)
        if value and value.strip():
            return value.strip()
        return None

    def resolve(self) -> str | None:
        return self.environment_value() or self.saved_value()

    def store(self, value: str) -> None:
        self._storage.set(self.storage_key, value)

    def clear(self) -> None:
        self._storage.remove(self.storage_key)


class CredentialResolver(ConfigResolver):
    """API key for the analysis model."""

    def __init__(self, settings: Settings, storage: StoragePort):
        super().__init__([settings.build_api_key, settings.api_key], storage, API_KEY_STORAGE_KEY)

    def environment_key_detected(self) -> bool:
        return self.environment_value() is not None

    def require(self) -> str:
        key = self.resolve()
        if key is None:
            logger.info("No API key in environment or storage")
            raise CredentialsMissing()
        return key

    def save(self, candidate: str) -> str:
        key = (candidate or "").strip()
        if len(key) <= MIN_KEY_LENGTH:
            raise InvalidCredential()
        self.store(key)
        logger.info("Saved user API key (%s)", mask_key(key))
        return key

    def masked(self) -> str | None:
        key = self.saved_value()
        return mask_key(key) if key else None


def mask_key(key: str) -> str:
    if len(key) <= 8:
        return "*" * len(key)
    return f"{key[:4]}…{key[-4:]}"
