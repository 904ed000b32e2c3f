"""
routes_auth.py
---------------
Session routes for Escola 360.

Features:
- Login endpoint: any non-empty email and password open a session.
- Issues JWT access tokens carrying the session user.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from escola360.core import security

# Create a router instance
router = APIRouter(prefix="/auth", tags=["Authentication"])


# ------------------------------------------------
# Request Models
# ------------------------------------------------
class LoginRequest(BaseModel):
    email: str
    password: str


# ------------------------------------------------
# Routes
# ------------------------------------------------
@router.post("/login")
def login(request: LoginRequest):
    """
    Open a session and return a JWT token.

    Returns:
        dict: {"access_token": <JWT>, "token_type": "bearer", "user": {...}}

    Raises:
        HTTPException: If email or password is empty.
    """
    if not request.email.strip() or not request.password:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email and password are required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = security.user_from_email(request.email)
    token = security.create_access_token(user)

    return {"access_token": token, "token_type": "bearer", "user": user.model_dump()}


@router.get("/me", response_model=security.User)
def me(user: security.User = Depends(security.get_current_user)):
    return user
