import json
from typing import Dict, Optional

from sqlalchemy.orm import sessionmaker

from gardencart.config import settings
from gardencart.db import make_engine, make_session_factory
from gardencart.models.session_entry import SessionEntry
from gardencart.utils.logs import get_logger
from gardencart.utils.transactions import smart_transaction

log = get_logger("session")

TOKEN_KEY = "token"
USER_KEY = "user"


class SessionStore:
    """
    Key/value persistence for the bearer token and the signed-in user.

    Exactly two keys live here, `token` and `user` (JSON), and they are
    always written and cleared together. Subclasses only provide raw
    get/put/delete of those keys.
    """

    def _read(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def _write(self, values: Dict[str, str]) -> None:
        raise NotImplementedError

    def _delete(self, keys) -> None:
        raise NotImplementedError

    def set_session(self, token: str, user: dict) -> None:
        self._write({TOKEN_KEY: token, USER_KEY: json.dumps(user)})

    def clear_session(self) -> None:
        self._delete((TOKEN_KEY, USER_KEY))

    def update_user(self, user: dict) -> None:
        self._write({USER_KEY: json.dumps(user)})

    def get_token(self) -> Optional[str]:
        return self._read(TOKEN_KEY)

    def get_user(self) -> Optional[dict]:
        raw = self._read(USER_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            log.warning("Discarding unreadable user record in session store")
            return None

    def is_empty(self) -> bool:
        return self._read(TOKEN_KEY) is None and self._read(USER_KEY) is None


class MemorySessionStore(SessionStore):
    """Process-local store; lives as long as the object (one browser tab)."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def _read(self, key):
        return self._data.get(key)

    def _write(self, values):
        self._data.update(values)

    def _delete(self, keys):
        for k in keys:
            self._data.pop(k, None)


class SqlSessionStore(SessionStore):
    """
    Store backed by the `session_entries` table, so a session survives a
    restart of the process holding it.
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None, url: Optional[str] = None):
        if session_factory is None:
            engine = make_engine(url or settings.SESSION_DATABASE_URL)
            SessionEntry.__table__.create(bind=engine, checkfirst=True)
            session_factory = make_session_factory(engine)
        self.SessionLocal = session_factory

    def _read(self, key):
        with self.SessionLocal() as s:
            rec = s.get(SessionEntry, key)
            return rec.value if rec else None

    def _write(self, values):
        with self.SessionLocal() as s:
            with smart_transaction(s):
                for key, value in values.items():
                    rec = s.get(SessionEntry, key)
                    if rec:
                        rec.value = value
                    else:
                        s.add(SessionEntry(key=key, value=value))

    def _delete(self, keys):
        with self.SessionLocal() as s:
            with smart_transaction(s):
                s.query(SessionEntry).filter(SessionEntry.key.in_(list(keys))).delete(
                    synchronize_session=False
                )
