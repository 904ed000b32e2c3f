from functools import lru_cache
from pathlib import Path
from typing import Dict

from fastapi import Depends

from escola360.core.config import LIBRARY_DB_PATH, LIBRARY_KEY
from escola360.core.security import User, get_current_user
from escola360.services.ai_planning_generator import AIContentGenerator, ContentGenerator
from escola360.services.library_store import KeyValueStorage, LibraryStore, SqliteKeyValueStorage
from escola360.services.planning_session import PlanningSession


@lru_cache
def get_generator() -> ContentGenerator:
    return AIContentGenerator()


@lru_cache
def get_storage() -> KeyValueStorage:
    return SqliteKeyValueStorage(Path(LIBRARY_DB_PATH))


# One working plan per signed-in user, kept in process memory
_sessions: Dict[str, PlanningSession] = {}


def get_planning_session(
    user: User = Depends(get_current_user),
    generator: ContentGenerator = Depends(get_generator),
) -> PlanningSession:
    session = _sessions.get(user.email)
    if session is None:
        session = PlanningSession(generator)
        _sessions[user.email] = session
    return session


def reset_sessions() -> None:
    _sessions.clear()


def get_library_store(
    user: User = Depends(get_current_user),
    storage: KeyValueStorage = Depends(get_storage),
) -> LibraryStore:
    # One library collection per user
    return LibraryStore(storage, key=f"{LIBRARY_KEY}:{user.email}")
