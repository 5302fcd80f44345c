from fastapi import Depends

from spinecheck.config import Settings, settings
from spinecheck.database import session_factory
from spinecheck.services.contact_service import ContactSubmitter
from spinecheck.services.credentials import CredentialResolver
from spinecheck.services.history import HistoryStore
from spinecheck.state import AppState, app_state
from spinecheck.storage import SqlStorage, StoragePort

_storage = SqlStorage(session_factory)


def get_settings() -> Settings:
    return settings


def get_storage() -> StoragePort:
    return _storage


def get_state() -> AppState:
    return app_state


def get_credentials(
    settings: Settings = Depends(get_settings),
    storage: StoragePort = Depends(get_storage),
) -> CredentialResolver:
    return CredentialResolver(settings, storage)


def get_history(storage: StoragePort = Depends(get_storage)) -> HistoryStore:
    history = HistoryStore(storage)
    history.load()
    return history


def get_contact_submitter(
    settings: Settings = Depends(get_settings),
    storage: StoragePort = Depends(get_storage),
) -> ContactSubmitter:
    return ContactSubmitter(settings, storage)
