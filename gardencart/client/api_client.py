from typing import Any, Callable, Dict, List, Optional

import requests

from gardencart.client.errors import (
    ApiNetworkError,
    ApiRequestError,
    ApiResponseError,
    SessionExpiredError,
)
from gardencart.client.navigation import LOGIN_PATH, Navigator
from gardencart.config import settings
from gardencart.session_store import SessionStore
from gardencart.utils.logs import get_logger

log = get_logger("api")

SESSION_EXPIRED_NOTICE = "Your session has expired. Please log in again."

_UNSET = object()


def _reason(res) -> str:
    # requests exposes `reason`, httpx `reason_phrase`
    return getattr(res, "reason", None) or getattr(res, "reason_phrase", None) or "Unknown error"


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        msg = payload.get("message") or payload.get("detail")
        if isinstance(msg, str) and msg:
            return msg
    return fallback


class ApiClient:
    """
    The one HTTP client every service goes through.

    It attaches the bearer token from `store` to each request and handles a
    401 in a single place: the session is cleared, the user is told, and the
    navigator is sent to the login screen (unless already on an auth screen).

    `http` is anything with a requests-style `request(method, url, ...)`;
    a `requests.Session` by default, FastAPI's TestClient in tests.
    """

    def __init__(
        self,
        store: SessionStore,
        base_url: Optional[str] = None,
        http=None,
        navigator: Optional[Navigator] = None,
        notify: Optional[Callable[[str], None]] = None,
        timeout: Optional[float] = _UNSET,
    ):
        self.store = store
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.navigator = navigator or Navigator()
        self.notify = notify or (lambda msg: log.warning(msg))
        self.timeout = settings.REQUEST_TIMEOUT if timeout is _UNSET else timeout
        self._expired_listeners: List[Callable[[], None]] = []

    def add_session_expired_listener(self, cb: Callable[[], None]) -> None:
        self._expired_listeners.append(cb)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self.store.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _handle_session_expired(self) -> None:
        self.store.clear_session()
        for cb in list(self._expired_listeners):
            cb()
        if not self.navigator.on_auth_screen():
            self.notify(SESSION_EXPIRED_NOTICE)
            self.navigator.navigate(LOGIN_PATH)

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = _UNSET,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises:
            SessionExpiredError: 401 from the server (session already cleared).
            ApiResponseError: any other non-2xx status.
            ApiNetworkError: no response was received.
            ApiRequestError: the request could not be built.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        timeout = self.timeout if timeout is _UNSET else timeout
        log.debug(f"{method.upper()} {url}")
        try:
            res = self.http.request(
                method.upper(),
                url,
                headers=self._headers(),
                json=json,
                params=params,
                timeout=timeout,
            )
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            log.error(f"{method.upper()} {url} failed: no response ({e})")
            raise ApiNetworkError(cause=e) from e
        except requests.exceptions.RequestException as e:
            log.error(f"{method.upper()} {url} could not be sent: {e}")
            raise ApiRequestError(str(e)) from e

        try:
            payload = res.json() if res.content else None
        except ValueError:
            payload = None

        if res.status_code == 401:
            log.warning(f"{method.upper()} {url} -> 401, clearing session")
            self._handle_session_expired()
            raise SessionExpiredError(_error_message(payload, "Session expired"), payload)
        if res.status_code >= 400:
            message = _error_message(payload, _reason(res))
            log.error(f"{method.upper()} {url} -> {res.status_code}: {message}")
            raise ApiResponseError(res.status_code, message, payload)
        log.debug(f"{method.upper()} {url} -> {res.status_code}")
        return payload

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)
