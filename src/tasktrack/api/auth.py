"""Auth API — registration, login, current user.

Learn: Routes for the credential + token pair:
- POST /register → create a user account, returns a token straight away
- POST /login → email/password → JWT
- GET /me → the user behind the presented token

Both failure modes of login ("no such email", "wrong password") come
back as the same 400 "Invalid email or password".
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_token_service,
)
from tasktrack.auth.jwt import TokenService
from tasktrack.db.engine import get_db
from tasktrack.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserRead,
)
from tasktrack.services.credential_service import CredentialService

router = APIRouter()


def _credential_svc(
    request: Request, db: AsyncSession = Depends(get_db)
) -> CredentialService:
    rounds = request.app.state.ctx.settings.bcrypt_rounds
    return CredentialService(db, bcrypt_rounds=rounds)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    tokens: TokenService = Depends(get_token_service),
    svc: CredentialService = Depends(_credential_svc),
):
    """Create a new user account and log it in."""
    user = await svc.register(body.name, body.email, body.password)
    return {
        "message": "User created successfully",
        "user": UserRead.model_validate(user),
        "token": tokens.issue(user.id),
    }


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    tokens: TokenService = Depends(get_token_service),
    svc: CredentialService = Depends(_credential_svc),
):
    """Login with email and password → JWT."""
    user = await svc.verify(body.email, body.password)
    return {
        "token": tokens.issue(user.id),
        "user": UserRead.model_validate(user),
    }


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_user),
    svc: CredentialService = Depends(_credential_svc),
):
    """Get the current authenticated user's info."""
    return await svc.get(identity.user_id)
