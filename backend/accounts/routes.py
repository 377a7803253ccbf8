# ------------------------------ IMPORTS ------------------------------
from fastapi import APIRouter, Depends, Path, Response
import logging

from sqlalchemy.orm import Session

from core.config.settings import settings
from core.database import get_db
from core.database.models import Account
from core.schemas import APIResponse
from core.security.auth import get_current_account, create_session_token
from core.services.email_service import EmailService, get_queued_email_service
from core.utils.serializers import serialize_model
from .service import AccountService
from .schemas import (
    AccountOut,
    RegisterRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ProfileUpdate,
    DeleteAccountRequest,
)

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
auth_router = APIRouter()
router = APIRouter()

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_account_service(
    db: Session = Depends(get_db),
    email: EmailService = Depends(get_queued_email_service)
) -> AccountService:
    """Dependency to get AccountService instance."""
    return AccountService(db, email)

# ------------------------------ AUTH ENDPOINTS ------------------------------

@auth_router.post("/register", response_model=APIResponse, tags=["Auth"])
async def register(
    payload: RegisterRequest,
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    account = service.register(payload.model_dump())
    return APIResponse(success=True, data={"account": serialize_model(account, AccountOut)})

@auth_router.post("/login", response_model=APIResponse, tags=["Auth"])
async def login(
    payload: LoginRequest,
    response: Response,
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    """Exchange credentials for a session token, also set as a cookie."""
    account = service.authenticate(payload.username, payload.password)
    token = create_session_token(account)
    response.set_cookie(
        key=settings.security.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        max_age=settings.security.session_expire_minutes * 60,
    )
    logger.info(f"Account {account.id} signed in")
    return APIResponse(
        success=True,
        data={"token": token, "account": serialize_model(account, AccountOut)}
    )

@auth_router.post("/logout", response_model=APIResponse, tags=["Auth"])
async def logout(response: Response) -> APIResponse:
    response.delete_cookie(settings.security.session_cookie_name)
    return APIResponse(success=True, data={})

@auth_router.post("/forgot-password", response_model=APIResponse, tags=["Auth"])
async def forgot_password(
    payload: ForgotPasswordRequest,
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    """Email a password reset link."""
    service.generate_reset_token(payload.email)
    return APIResponse(success=True, data={"message": "A reset link has been sent to your email"})

@auth_router.get("/reset-password/{token}", response_model=APIResponse, tags=["Auth"])
async def check_reset_token(
    token: str = Path(..., description="Reset token from the email"),
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    return APIResponse(success=True, data={"valid": service.is_reset_token_valid(token)})

@auth_router.post("/reset-password", response_model=APIResponse, tags=["Auth"])
async def reset_password(
    payload: ResetPasswordRequest,
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    service.reset_password(payload.token, payload.password, payload.confirm_password)
    return APIResponse(success=True, data={"message": "Your password has been updated"})

# ------------------------------ ACCOUNT ENDPOINTS ------------------------------

@router.get("/me", response_model=APIResponse, tags=["Account"])
async def get_profile(account: Account = Depends(get_current_account)) -> APIResponse:
    return APIResponse(success=True, data={"account": serialize_model(account, AccountOut)})

@router.put("/me", response_model=APIResponse, tags=["Account"])
async def update_profile(
    payload: ProfileUpdate,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    account = service.update_profile(account, payload.model_dump(exclude_unset=True))
    return APIResponse(success=True, data={"account": serialize_model(account, AccountOut)})

@router.post("/me/private", response_model=APIResponse, tags=["Account"])
async def become_private(
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    """Become a private seller."""
    account = service.become_private(account)
    return APIResponse(success=True, data={"account": serialize_model(account, AccountOut)})

@router.delete("/me/private", response_model=APIResponse, tags=["Account"])
async def remove_private(
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    """Stop selling privately; the private listing is removed."""
    removed = service.remove_private(account)
    return APIResponse(
        success=True,
        data={"account": serialize_model(account, AccountOut), "listings_removed": removed}
    )

@router.post("/me/delete", response_model=APIResponse, tags=["Account"])
async def delete_account(
    payload: DeleteAccountRequest,
    response: Response,
    account: Account = Depends(get_current_account),
    service: AccountService = Depends(get_account_service)
) -> APIResponse:
    """Permanently delete the caller's account."""
    account_id = account.id
    service.delete_account(account, payload.password)
    response.delete_cookie(settings.security.session_cookie_name)
    return APIResponse(success=True, data={"deleted": account_id})

# ------------------------------ END OF FILE ------------------------------
