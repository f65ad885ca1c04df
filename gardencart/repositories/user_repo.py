import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from gardencart.config import settings
from gardencart.models.user import AuthToken, User

PBKDF2_ROUNDS = 100_000


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), (salt + settings.SECRET_KEY).encode(), PBKDF2_ROUNDS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    salt, _, _ = password_hash.partition("$")
    return hmac.compare_digest(hash_password(password, salt), password_hash)


def _as_aware(dt: datetime) -> datetime:
    # SQLite hands datetimes back naive
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email.lower()).first()

    def create(self, email: str, name: str, password: str, **profile) -> User:
        u = User(email=email.lower(), name=name, password_hash=hash_password(password), **profile)
        self.db.add(u)
        self.db.flush()
        return u

    def issue_token(self, user: User, ttl_seconds: Optional[int] = None) -> AuthToken:
        ttl = ttl_seconds if ttl_seconds is not None else settings.TOKEN_TTL_SECONDS
        t = AuthToken(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=ttl),
        )
        self.db.add(t)
        self.db.flush()
        return t

    def user_for_token(self, token: str) -> Optional[User]:
        t = self.db.query(AuthToken).filter(AuthToken.token == token).first()
        if not t or _as_aware(t.expires_at) <= datetime.now(timezone.utc):
            return None
        return t.user

    def purge_expired_tokens(self) -> int:
        now = datetime.now(timezone.utc)
        expired = [
            t for t in self.db.query(AuthToken).all() if _as_aware(t.expires_at) <= now
        ]
        for t in expired:
            self.db.delete(t)
        self.db.flush()
        return len(expired)
