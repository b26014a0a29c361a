"""POST /users - register an end-user account"""

from fastapi import APIRouter, Depends

from wallet_gateway.api.dependencies import get_session_claims, get_transaction_engine
from wallet_gateway.api.routes.schemas import DataResponse, RegisterUserRequest, UserSchema
from wallet_gateway.domain.models import SessionClaims
from wallet_gateway.services.transaction_engine import TransactionEngine

router = APIRouter()


@router.post("/users", response_model=DataResponse[UserSchema], status_code=201)
async def register_user(
    request_body: RegisterUserRequest,
    claims: SessionClaims = Depends(get_session_claims),
    engine: TransactionEngine = Depends(get_transaction_engine),
):
    """Register a zero-balance user owned by the session's admin"""
    user = await engine.register_user(
        name=request_body.name,
        email=request_body.email,
        state_code=request_body.state_code,
        township_code=request_body.township_code,
        acting_admin_code=claims.admin_code,
    )
    return DataResponse(data=UserSchema.model_validate(user))
