"""Authentication API endpoints."""
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..auth.dependencies import (
    clear_session_cookie,
    get_current_account,
    get_session_token,
    set_session_cookie,
)
from ..auth.sessions import SessionStore
from ..core.database import get_db
from ..core.logging import get_logger
from ..models import Account
from ..services.account_service import AccountService
from .schemas import AccountEnvelope, AccountResponse, LoginRequest, MessageResponse, SignupRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AccountEnvelope, status_code=status.HTTP_201_CREATED)
async def signup(
    payload: SignupRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> AccountEnvelope:
    """Register a new account and log it in."""
    account = await AccountService(db).signup(payload.username, payload.email, payload.password)
    token = await SessionStore(db).create(account.id)
    set_session_cookie(response, token)

    logger.info("account_signed_up", account_id=str(account.id), username=account.username)
    return AccountEnvelope(message="User registered successfully", user=AccountResponse.from_account(account))


@router.post("/login", response_model=AccountEnvelope)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> AccountEnvelope:
    account = await AccountService(db).authenticate(payload.email, payload.password)
    token = await SessionStore(db).create(account.id)
    set_session_cookie(response, token)
    return AccountEnvelope(message="Login successful", user=AccountResponse.from_account(account))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    """Destroy the current session and clear its cookie."""
    await SessionStore(db).destroy(get_session_token(request))
    clear_session_cookie(response)
    logger.info("account_logged_out", account_id=str(account.id))
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=AccountEnvelope)
async def me(account: Account = Depends(get_current_account)) -> AccountEnvelope:
    return AccountEnvelope(user=AccountResponse.from_account(account))
