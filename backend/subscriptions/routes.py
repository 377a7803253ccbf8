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
from .service import SubscriptionService
from .schemas import PlanOut, UserSubscriptionOut, SubscribeRequest

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
router = APIRouter()

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_subscription_service(
    db: Session = Depends(get_db),
    email: EmailService = Depends(get_queued_email_service)
) -> SubscriptionService:
    """Dependency to get SubscriptionService instance."""
    return SubscriptionService(db, email)

# ------------------------------ PLAN ENDPOINTS ------------------------------

@router.get("/plans", response_model=APIResponse, tags=["Subscriptions"])
async def list_plans(service: SubscriptionService = Depends(get_subscription_service)) -> APIResponse:
    plans = service.list_plans()
    return APIResponse(success=True, data={"plans": serialize_models(plans, PlanOut)})

@router.post("/plans/{plan_id}/subscribe", response_model=APIResponse, tags=["Subscriptions"])
async def subscribe(
    payload: SubscribeRequest,
    plan_id: int = Path(..., description="Plan ID"),
    account: Account = Depends(get_current_account),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    """Buy a plan directly, without going through the cart."""
    user_subscription = service.subscribe(account, plan_id, auto_renew=payload.auto_renew)
    return APIResponse(success=True, data={"subscription": serialize_model(user_subscription, UserSubscriptionOut)})

# ------------------------------ ACCOUNT SUBSCRIPTION ENDPOINTS ------------------------------

@router.get("/mine", response_model=APIResponse, tags=["Subscriptions"])
async def get_my_subscriptions(
    account: Account = Depends(get_current_account),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    subscriptions = service.get_user_subscriptions(account)
    active = service.get_active_subscriptions(account)
    return APIResponse(
        success=True,
        data={
            "subscriptions": serialize_models(subscriptions, UserSubscriptionOut),
            "active_ids": [s.id for s in active],
        }
    )

@router.post("/mine/{subscription_id}/auto-renew", response_model=APIResponse, tags=["Subscriptions"])
async def toggle_auto_renew(
    subscription_id: int = Path(..., description="Subscription ID"),
    account: Account = Depends(get_current_account),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    user_subscription = service.toggle_auto_renew(account, subscription_id)
    return APIResponse(success=True, data={"subscription": serialize_model(user_subscription, UserSubscriptionOut)})

@router.delete("/mine/{subscription_id}", response_model=APIResponse, tags=["Subscriptions"])
async def cancel_subscription(
    subscription_id: int = Path(..., description="Subscription ID"),
    account: Account = Depends(get_current_account),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    service.cancel_subscription(account, subscription_id)
    return APIResponse(success=True, data={"cancelled": subscription_id})

# ------------------------------ END OF FILE ------------------------------
