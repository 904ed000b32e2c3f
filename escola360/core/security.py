"""
security.py
------------
Session tokens for the Escola 360 backend.

Notes:
- Sign-in is credential-free: any non-empty email and password open a session.
  There is no user database; the token itself carries the session user.
- Provides functions for creating and validating JWT tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from pydantic import BaseModel

# Load constants from app configuration
from escola360.core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES


class User(BaseModel):
    email: str
    name: str


def user_from_email(email: str) -> User:
    """Session user whose display name is the local part of the email."""
    email = email.strip()
    return User(email=email, name=email.split("@")[0])


# -------------------------
# JWT Token Handling
# -------------------------
def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """
    Creates a signed JWT access token for the session user.

    Args:
        user (User): Session user; its email becomes the token subject.
        expires_delta (timedelta, optional): Custom expiration time.
                                             Defaults to ACCESS_TOKEN_EXPIRE_MINUTES.

    Returns:
        str: Encoded JWT token as a string.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": user.email, "name": user.name, "exp": expire}
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


# -------------------------
# JWT Token Verification
# -------------------------
# OAuth2PasswordBearer tells FastAPI where to find the login endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    """
    Decodes and verifies a JWT token, extracting the session user.

    Raises:
        HTTPException: If the token is invalid or expired.
    """
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise credentials_error
    email = payload.get("sub")
    if email is None:
        raise credentials_error
    return User(email=email, name=payload.get("name") or email.split("@")[0])
