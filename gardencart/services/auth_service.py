import enum
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from gardencart.client.api_client import ApiClient
from gardencart.client.endpoints import AuthAPI
from gardencart.client.errors import ApiError
from gardencart.schemas.user_schema import AuthUser
from gardencart.utils.logs import get_logger

log = get_logger("auth")


class AuthStatus(enum.Enum):
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


@dataclass
class AuthResult:
    success: bool
    user: Optional[AuthUser] = None
    message: Optional[str] = None


def _login_message(e: Exception) -> str:
    payload = getattr(e, "payload", None)
    if isinstance(payload, dict) and payload.get("message"):
        return payload["message"]
    return "Login failed"


def _register_message(e: Exception) -> str:
    payload = getattr(e, "payload", None)
    if isinstance(payload, dict):
        if payload.get("message"):
            return payload["message"]
        errors = payload.get("errors")
        if errors:
            return ", ".join(str(x) for x in errors)
    return "Registration failed"


class AuthState:
    """
    Who is logged in.

    Starts in LOADING; `check_auth_status()` settles it into AUTHENTICATED or
    UNAUTHENTICATED. A 401 seen anywhere by the ApiClient drops it back to
    UNAUTHENTICATED.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.store = api.store
        self.auth_api = AuthAPI(api)
        self.user: Optional[AuthUser] = None
        self.status = AuthStatus.LOADING
        self._listeners: List[Callable[["AuthState"], None]] = []
        api.add_session_expired_listener(self._on_session_expired)

    @property
    def loading(self) -> bool:
        return self.status is AuthStatus.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED and self.user is not None

    def add_listener(self, cb: Callable[["AuthState"], None]) -> None:
        self._listeners.append(cb)

    def _set(self, user: Optional[AuthUser]) -> None:
        self.user = user
        self.status = AuthStatus.AUTHENTICATED if user else AuthStatus.UNAUTHENTICATED
        for cb in list(self._listeners):
            cb(self)

    def _on_session_expired(self) -> None:
        if self.status is not AuthStatus.UNAUTHENTICATED:
            log.info("Session expired, signing out")
            self._set(None)

    def check_auth_status(self) -> AuthStatus:
        token = self.store.get_token()
        saved_user = self.store.get_user()
        if not (token and saved_user):
            log.info("No token found - user needs to login")
            self._set(None)
            return self.status
        try:
            res = self.auth_api.get_me()
            user = AuthUser.model_validate((res or {}).get("user"))
        except (ApiError, ValidationError) as e:
            log.warning(f"Token verification failed: {e}")
            self.store.clear_session()
            # a 401 was already handled by _on_session_expired
            if self.status is not AuthStatus.UNAUTHENTICATED:
                self._set(None)
        else:
            log.info(f"User authenticated: {user.email}")
            self._set(user)
        return self.status

    def _start_session(self, res) -> AuthUser:
        data = (res or {}).get("data") or {}
        user = AuthUser.model_validate(data.get("user"))
        self.store.set_session(data["token"], user.to_wire())
        self._set(user)
        return user

    def login(self, email: str, password: str) -> AuthResult:
        try:
            res = self.auth_api.login({"email": email, "password": password})
            user = self._start_session(res)
        except (ApiError, ValidationError, KeyError) as e:
            log.warning(f"Login error: {e}")
            self.store.clear_session()
            self._set(None)
            message = _login_message(e)
            return AuthResult(success=False, message=message)
        log.info(f"Login successful: {user.email}")
        return AuthResult(success=True, user=user)

    def register(self, user_data: Dict) -> AuthResult:
        try:
            res = self.auth_api.register(user_data)
            user = self._start_session(res)
        except (ApiError, ValidationError, KeyError) as e:
            log.warning(f"Registration error: {e}")
            self.store.clear_session()
            self._set(None)
            message = _register_message(e)
            return AuthResult(success=False, message=message)
        log.info(f"Registration successful: {user.email}")
        return AuthResult(success=True, user=user)

    def logout(self) -> None:
        log.info("Logging out")
        self.store.clear_session()
        self._set(None)

    def update_user(self, patch: Dict) -> Optional[AuthUser]:
        """Merge `patch` into the local user record; no backend round trip."""
        if self.user is None:
            return None
        by_alias = {f.alias: name for name, f in AuthUser.model_fields.items() if f.alias}
        patch = {by_alias.get(k, k): v for k, v in patch.items()}
        merged = {**self.user.model_dump(), **patch}
        self.user = AuthUser.model_validate(merged)
        self.store.update_user(self.user.to_wire())
        return self.user
