import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from gardencart.db import get_db
from gardencart.models.user import User
from gardencart.repositories.user_repo import UserRepository, verify_password
from gardencart.server.deps import current_user
from gardencart.server.serializers import user_to_wire

router = APIRouter(prefix="/api/auth", tags=["auth"])

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RegisterIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    name: str = ""
    email: str = ""
    password: str = ""
    garden_type: Optional[str] = None
    experience_level: Optional[str] = None
    location: Optional[str] = None


class LoginIn(BaseModel):
    email: str
    password: str


def _session_payload(repo: UserRepository, user: User) -> dict:
    token = repo.issue_token(user)
    return {"success": True, "data": {"token": token.token, "user": user_to_wire(user)}}


@router.post("/register", summary="Register", status_code=201)
def register(payload: RegisterIn, db: Session = Depends(get_db)):
    errors = []
    if not payload.name.strip():
        errors.append("Name is required")
    if not EMAIL_RE.match(payload.email):
        errors.append("Please provide a valid email")
    if len(payload.password) < 6:
        errors.append("Password must be at least 6 characters")
    if errors:
        return JSONResponse(status_code=400, content={"success": False, "errors": errors})

    repo = UserRepository(db)
    if repo.get_by_email(payload.email):
        raise HTTPException(status_code=409, detail="User already exists with this email")
    user = repo.create(
        payload.email,
        payload.name.strip(),
        payload.password,
        garden_type=payload.garden_type,
        experience_level=payload.experience_level,
        location=payload.location,
    )
    body = _session_payload(repo, user)
    db.commit()
    return body


@router.post("/login", summary="Login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    user = repo.get_by_email(payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    body = _session_payload(repo, user)
    db.commit()
    return body


@router.get("/me", summary="Who am I")
def me(user: User = Depends(current_user)):
    return {"success": True, "user": user_to_wire(user)}
