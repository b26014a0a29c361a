"""POST /transactions - transfer, withdraw, deposit, and history listing"""

import time
from fastapi import APIRouter, Depends, Request

from wallet_gateway.api.dependencies import get_request_id, get_session_claims, get_transaction_engine
from wallet_gateway.api.routes.schemas import (
    BalanceChangeSchema,
    DataResponse,
    TransactionRequest,
    TransactionResult,
    TransactionSchema,
    TransferResultSchema,
    UserSchema,
)
from wallet_gateway.domain.models import BalanceChange, SessionClaims, TransferResult
from wallet_gateway.infrastructure.observability.logging import log_transaction
from wallet_gateway.services.transaction_engine import TransactionEngine

router = APIRouter()


@router.post("/transactions", response_model=DataResponse[TransactionResult])
async def run_transaction(
    request_body: TransactionRequest,
    request: Request,
    claims: SessionClaims = Depends(get_session_claims),
    engine: TransactionEngine = Depends(get_transaction_engine),
):
    """
    Execute one transaction operation as the session's admin.

    Flow:
    1. Resolve the "process" discriminator into a typed operation
    2. Engine authorizes, checks invariants, and commits atomically
    3. Log committed money movements
    """
    start_time = time.time()
    request_id = get_request_id(request)

    result = await engine.execute(request_body.to_operation(), claims.admin_code)

    if isinstance(result, TransferResult):
        data = TransferResultSchema(
            sender=UserSchema.model_validate(result.sender),
            receiver=UserSchema.model_validate(result.receiver),
            transaction=TransactionSchema.from_record(result.record),
        )
    elif isinstance(result, BalanceChange):
        data = BalanceChangeSchema(
            user=UserSchema.model_validate(result.user),
            transaction=TransactionSchema.from_record(result.record),
        )
    else:
        return DataResponse(data=[TransactionSchema.from_record(r) for r in result])

    duration_ms = (time.time() - start_time) * 1000
    log_transaction(request_id, data.transaction.type, claims.admin_code, data.transaction.amount, duration_ms)
    return DataResponse(data=data)
