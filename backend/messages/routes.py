# ------------------------------ IMPORTS ------------------------------
from fastapi import APIRouter, Depends, Path
from typing import Optional
import logging

from sqlalchemy.orm import Session

from core.database import get_db
from core.database.models import Account
from core.schemas import APIResponse
from core.security.auth import get_current_account, get_optional_account
from core.services.email_service import EmailService, get_queued_email_service
from core.utils.serializers import serialize_model, serialize_models
from .service import MessageService
from .schemas import QuoteRequestOut, PrivateMessageCreate, QuoteRequestCreate, ResponseCreate

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
router = APIRouter()
quotes_router = APIRouter()

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_message_service(
    db: Session = Depends(get_db),
    email: EmailService = Depends(get_queued_email_service)
) -> MessageService:
    """Dependency to get MessageService instance."""
    return MessageService(db, email)

# ------------------------------ PRIVATE MESSAGE ENDPOINTS ------------------------------

@router.get("", response_model=APIResponse, tags=["Messages"])
async def get_messages(
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    """Inbox and outbox in one list."""
    messages = service.get_messages_for_user(account)
    return APIResponse(success=True, data={"messages": serialize_models(messages, QuoteRequestOut)})

@router.post("", response_model=APIResponse, tags=["Messages"])
async def send_private_message(
    payload: PrivateMessageCreate,
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    request = service.create_private_message(account, payload.listing_id, payload.message)
    return APIResponse(success=True, data={"message": serialize_model(request, QuoteRequestOut)})

@router.post("/{request_id}/respond", response_model=APIResponse, tags=["Messages"])
async def respond_to_private_message(
    payload: ResponseCreate,
    request_id: int = Path(..., description="Message ID"),
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    request = service.respond_to_private_message(request_id, account, payload.response)
    return APIResponse(success=True, data={"message": serialize_model(request, QuoteRequestOut)})

# ------------------------------ QUOTE ENDPOINTS ------------------------------

@quotes_router.post("", response_model=APIResponse, tags=["Quotes"])
async def request_quote(
    payload: QuoteRequestCreate,
    account: Optional[Account] = Depends(get_optional_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    """Ask a dealer for a quote; signed-in or anonymous with an email."""
    request = service.request_quote(account, payload.listing_id, email=payload.email, message=payload.message)
    return APIResponse(success=True, data={"quote": serialize_model(request, QuoteRequestOut)})

@quotes_router.get("/mine", response_model=APIResponse, tags=["Quotes"])
async def get_my_quotes(
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    quotes = service.get_quotes_for_user(account)
    return APIResponse(success=True, data={"quotes": serialize_models(quotes, QuoteRequestOut)})

@quotes_router.post("/{request_id}/respond", response_model=APIResponse, tags=["Quotes"])
async def respond_to_quote(
    payload: ResponseCreate,
    request_id: int = Path(..., description="Quote request ID"),
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    """Dealer answers a quote request."""
    request = service.respond_to_quote(request_id, account, payload.response)
    return APIResponse(success=True, data={"quote": serialize_model(request, QuoteRequestOut)})

# ------------------------------ END OF FILE ------------------------------
