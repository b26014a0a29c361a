"""POST /login - verify credentials and open a session"""

from fastapi import APIRouter, Depends, Response

from wallet_gateway.api.dependencies import get_auth_gate
from wallet_gateway.api.routes.schemas import DataResponse, LoginData, LoginRequest
from wallet_gateway.config import settings
from wallet_gateway.services.auth_gate import AuthGate

router = APIRouter()


@router.post("/login", response_model=DataResponse[LoginData])
async def login(
    request_body: LoginRequest,
    response: Response,
    auth_gate: AuthGate = Depends(get_auth_gate),
):
    """
    Exchange an admin code and password for a session.

    The signed token travels only in an HTTP-only cookie; the body carries
    the claims it encodes.
    """
    claims = await auth_gate.login(request_body.admin_code, request_body.password)
    token = auth_gate.issue_session(claims)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="strict",
    )
    return DataResponse(data=LoginData(admin_code=claims.admin_code, role=claims.role))
