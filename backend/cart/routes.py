# ------------------------------ IMPORTS ------------------------------
from fastapi import APIRouter, Depends, Path
import logging

from sqlalchemy.orm import Session

from core.database import get_db
from core.database.models import Account
from core.schemas import APIResponse
from core.security.auth import get_current_account
from core.services.email_service import EmailService, get_queued_email_service
from core.utils.serializers import serialize_model, serialize_models
from .service import CartService
from .schemas import CartItemOut, PaymentOut, QuantityUpdate, PlanCartAdd

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
router = APIRouter()

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_cart_service(
    db: Session = Depends(get_db),
    email: EmailService = Depends(get_queued_email_service)
) -> CartService:
    """Dependency to get CartService instance."""
    return CartService(db, email)

def _cart_data(service: CartService, account: Account) -> dict:
    summary = service.get_summary(account)
    return {
        "items": serialize_models(summary["items"], CartItemOut),
        "saved": serialize_models(summary["saved"], CartItemOut),
        "subtotal": float(summary["subtotal"]),
        "total": float(summary["total"]),
    }

# ------------------------------ CART ENDPOINTS ------------------------------

@router.get("", response_model=APIResponse, tags=["Cart"])
async def get_cart(
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    """Active items, saved items and totals."""
    return APIResponse(success=True, data=_cart_data(service, account))

@router.post("/listings/{listing_id}", response_model=APIResponse, tags=["Cart"])
async def add_listing_to_cart(
    listing_id: int = Path(..., description="Listing ID"),
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    item = service.add_to_cart(account, listing_id)
    return APIResponse(success=True, data={"item": serialize_model(item, CartItemOut)})

@router.post("/plans/{plan_id}", response_model=APIResponse, tags=["Cart"])
async def add_plan_to_cart(
    payload: PlanCartAdd,
    plan_id: int = Path(..., description="Plan ID"),
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    item = service.add_subscription_to_cart(account, plan_id, payload.listing_id)
    return APIResponse(success=True, data={"item": serialize_model(item, CartItemOut)})

@router.put("/items/{item_id}", response_model=APIResponse, tags=["Cart"])
async def update_quantity(
    payload: QuantityUpdate,
    item_id: int = Path(..., description="Cart item ID"),
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    service.update_quantity(account, item_id, payload.quantity)
    return APIResponse(success=True, data=_cart_data(service, account))

@router.delete("/items/{item_id}", response_model=APIResponse, tags=["Cart"])
async def remove_from_cart(
    item_id: int = Path(..., description="Cart item ID"),
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    service.remove_from_cart(account, item_id)
    return APIResponse(success=True, data=_cart_data(service, account))

@router.post("/items/{item_id}/save", response_model=APIResponse, tags=["Cart"])
async def save_for_later(
    item_id: int = Path(..., description="Cart item ID"),
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    service.save_for_later(account, item_id)
    return APIResponse(success=True, data=_cart_data(service, account))

@router.post("/items/{item_id}/restore", response_model=APIResponse, tags=["Cart"])
async def restore_from_saved(
    item_id: int = Path(..., description="Cart item ID"),
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    service.restore_from_saved(account, item_id)
    return APIResponse(success=True, data=_cart_data(service, account))

@router.post("/checkout", response_model=APIResponse, tags=["Cart"])
async def checkout(
    account: Account = Depends(get_current_account),
    service: CartService = Depends(get_cart_service)
) -> APIResponse:
    payment = service.checkout(account)
    return APIResponse(success=True, data={"payment": serialize_model(payment, PaymentOut)})

# ------------------------------ END OF FILE ------------------------------
