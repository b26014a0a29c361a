"""Admin directory endpoints"""

from typing import List, Literal
from fastapi import APIRouter, Depends, Query

from wallet_gateway.api.dependencies import (
    get_admin_directory,
    get_session_claims,
    get_transaction_engine,
    require_super_admin,
)
from wallet_gateway.api.routes.schemas import (
    AdminActionRequest,
    AdminSchema,
    CreateAdminRequest,
    DataResponse,
    TransactionSchema,
    UserSchema,
)
from wallet_gateway.domain.exceptions import AccessDenied
from wallet_gateway.domain.models import SessionClaims
from wallet_gateway.services.admin_directory import AdminDirectory
from wallet_gateway.services.transaction_engine import TransactionEngine

router = APIRouter()

AdminProcess = Literal["activate", "deactivate", "search"]


@router.get("/admins", response_model=DataResponse[List[AdminSchema]])
async def list_admins(
    claims: SessionClaims = Depends(get_session_claims),
    directory: AdminDirectory = Depends(get_admin_directory),
):
    admins = await directory.find_all()
    return DataResponse(data=[AdminSchema.model_validate(a) for a in admins])


@router.post("/admins", response_model=DataResponse[AdminSchema], status_code=201)
async def create_admin(
    request_body: CreateAdminRequest,
    claims: SessionClaims = Depends(require_super_admin),
    directory: AdminDirectory = Depends(get_admin_directory),
):
    """Create an Active admin; only super admins may do this"""
    admin = await directory.create(request_body.name, request_body.password, request_body.role)
    return DataResponse(data=AdminSchema.model_validate(admin))


async def _run_action(
    code: str,
    process: AdminProcess,
    claims: SessionClaims,
    directory: AdminDirectory,
) -> DataResponse[AdminSchema]:
    if process == "search":
        admin = await directory.find_by_code(code)
    elif not claims.is_super:
        # Lookups are open to any session; the directory re-checks role and activation for state changes
        raise AccessDenied()
    elif process == "activate":
        admin = await directory.activate(code, claims.admin_code)
    else:
        admin = await directory.deactivate(code, claims.admin_code)
    return DataResponse(data=AdminSchema.model_validate(admin))


@router.get("/admins/{code}/actions", response_model=DataResponse[AdminSchema])
async def admin_action_query(
    code: str,
    process: AdminProcess = Query(..., description="activate | deactivate | search"),
    claims: SessionClaims = Depends(get_session_claims),
    directory: AdminDirectory = Depends(get_admin_directory),
):
    return await _run_action(code, process, claims, directory)


@router.post("/admins/{code}/actions", response_model=DataResponse[AdminSchema])
async def admin_action(
    code: str,
    request_body: AdminActionRequest,
    claims: SessionClaims = Depends(get_session_claims),
    directory: AdminDirectory = Depends(get_admin_directory),
):
    return await _run_action(code, request_body.process, claims, directory)


@router.get("/admins/{code}/transactions", response_model=DataResponse[List[TransactionSchema]])
async def admin_transactions(
    code: str,
    newest_first: bool = Query(False),
    claims: SessionClaims = Depends(get_session_claims),
    engine: TransactionEngine = Depends(get_transaction_engine),
):
    """Transactions performed by an admin, oldest first by default"""
    records = await engine.list_transactions_for_admin(code, newest_first=newest_first)
    return DataResponse(data=[TransactionSchema.from_record(r) for r in records])


@router.get("/admins/{code}/user", response_model=DataResponse[List[UserSchema]])
async def admin_users(
    code: str,
    claims: SessionClaims = Depends(get_session_claims),
    directory: AdminDirectory = Depends(get_admin_directory),
):
    """Users registered under an admin code"""
    users = await directory.list_users(code)
    return DataResponse(data=[UserSchema.model_validate(u) for u in users])
