"""
Authentication API Routes — Register, Login, Me.
"""
from typing import Optional
from fastapi import APIRouter, HTTPException, Request, Response, status, Depends
from pydantic import BaseModel, EmailStr, Field
import structlog

from mentesegura.middleware.auth_middleware import get_current_user
from mentesegura.middleware.rate_limiter import auth_limit, get_limiter
from mentesegura.models.user import User
from mentesegura.services.auth_service import get_auth_service, AuthService

log = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["authentication"])
limiter = get_limiter()


# ---- Request/Response Models ----

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=255)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str = "Sua conta foi criada com sucesso."


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: str
    full_name: Optional[str] = None


# ---- Endpoints ----

@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(auth_limit)
async def register(
    request: Request,
    response: Response,
    req: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Create a student account. Passwords need at least 6 characters."""
    user = await auth_service.register_user(
        email=req.email,
        password=req.password,
        full_name=req.full_name,
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Este e-mail já está cadastrado.",
        )

    log.info("user_registered_via_api", user_id=user.id)
    return RegisterResponse(user_id=user.id, email=user.email)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(auth_limit)
async def login(
    request: Request,
    response: Response,
    req: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange email + password for a bearer access token."""
    tokens = await auth_service.login(req.email, req.password)

    if not tokens:
        # same message for unknown email and wrong password
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="E-mail ou senha inválidos.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(**tokens)


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {
        "user_id": user.id,
        "email": user.email,
        "full_name": user.full_name,
    }
