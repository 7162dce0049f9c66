from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, Request, Response, status
from pydantic import ValidationError
from .schemas import User
import logging
import os
from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.getenv("SECRET_KEY", "your-secret-key-here")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
SESSION_MAX_AGE_MINUTES = int(os.getenv("SESSION_MAX_AGE_MINUTES", "10080"))

# Cookie de session: l'utilisateur connecté sérialisé et signé
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "auth_user")
SESSION_COOKIE_SECURE = str(os.getenv("SESSION_COOKIE_SECURE", "false")).lower() == "true"
SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "lax").lower()
SESSION_COOKIE_PATH = os.getenv("SESSION_COOKIE_PATH", "/")

logger = logging.getLogger(__name__)


class LoginRequired(Exception):
    """Levée quand une page protégée est demandée sans session valide"""


def create_session_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=SESSION_MAX_AGE_MINUTES))
    to_encode = {
        "sub": str(user.id),
        "user": user.model_dump(mode="json"),
        "exp": expire,
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def read_session_token(token: Optional[str]) -> Optional[User]:
    if not token:
        return None
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
    try:
        return User.model_validate(payload.get("user") or {})
    except ValidationError as e:
        logger.warning(f"Session illisible: {e}")
        return None

def get_session_user(request: Request) -> Optional[User]:
    """Utilisateur de la session courante, ou None (pages publiques)"""
    return read_session_token(request.cookies.get(SESSION_COOKIE_NAME))

def set_session_cookie(response: Response, user: User):
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=create_session_token(user),
        max_age=SESSION_MAX_AGE_MINUTES * 60,
        httponly=True,
        samesite=SESSION_COOKIE_SAMESITE,
        secure=SESSION_COOKIE_SECURE,
        path=SESSION_COOKIE_PATH,
    )

def clear_session_cookie(response: Response):
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        path=SESSION_COOKIE_PATH,
        samesite=SESSION_COOKIE_SAMESITE,
        secure=SESSION_COOKIE_SECURE,
        httponly=True,
    )

def require_session(request: Request) -> User:
    user = get_session_user(request)
    if user is None:
        raise LoginRequired("Session absente ou expirée")
    return user

def require_admin(current_user: User = Depends(require_session)) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Accès réservé aux administrateurs"
        )
    return current_user
