from typing import List

LOGIN_PATH = "/login"
AUTH_PATHS = ("/login", "/register", "/signup")


class Navigator:
    """Tracks the current screen so the client can redirect on session expiry."""

    def __init__(self, path: str = "/"):
        self.path = path
        self.history: List[str] = [path]

    def navigate(self, path: str) -> None:
        self.path = path
        self.history.append(path)

    def on_auth_screen(self) -> bool:
        path = self.path.split("?", 1)[0].rstrip("/") or "/"
        return any(path == p or path.startswith(p + "/") for p in AUTH_PATHS)
