"""Admin login and profile."""
from fastapi import APIRouter, Depends, HTTPException, status

from showcase.container import Services
from showcase.dependencies import get_services, require_admin
from showcase.errors import StoreUnavailable
from showcase.schemas.auth import LoginRequest, LoginResponse, Principal, ProfileResponse
from showcase.security import create_access_token

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/login", response_model=LoginResponse)
async def post_admin_login(
    payload: LoginRequest,
    services: Services = Depends(get_services),
) -> LoginResponse:
    """Exchange username/password for a bearer token. 401 on bad credentials."""
    try:
        principal = await services.accounts.authenticate(payload.username, payload.password)
    except StoreUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Account store unavailable")
    if principal is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token(principal, services.settings.jwt_secret, services.settings.jwt_expire_hours)
    return LoginResponse(token=token, user=principal)


@router.get("/profile", response_model=ProfileResponse)
async def get_admin_profile(principal: Principal = Depends(require_admin)) -> ProfileResponse:
    return ProfileResponse(user=principal, message="Admin access granted")
