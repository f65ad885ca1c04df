from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from gardencart.db import get_db
from gardencart.models.user import User
from gardencart.repositories.user_repo import UserRepository


def current_user(
    authorization: Optional[str] = Header(None), db: Session = Depends(get_db)
) -> User:
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Not authorized, no token")
    user = UserRepository(db).user_for_token(token.strip())
    if not user:
        raise HTTPException(status_code=401, detail="Not authorized, token invalid or expired")
    return user
