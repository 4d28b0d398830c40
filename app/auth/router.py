from fastapi import APIRouter

from app.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, UserResponse
from app.core.dependencies import AuthServiceDep

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(body: RegisterRequest, auth: AuthServiceDep) -> UserResponse:
    user = await auth.register(body)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, auth: AuthServiceDep) -> TokenResponse:
    token = await auth.login(body.email, body.password)
    return TokenResponse(token=token)
