# ------------------------------ IMPORTS ------------------------------
from fastapi import APIRouter, Query, Depends, Path
from pydantic import BaseModel, Field
from typing import Optional, List
import logging

from sqlalchemy.orm import Session

from accounts.schemas import AccountOut
from catalog.routes import get_listing_service
from catalog.schemas import ListingOut, ListingUpdate
from catalog.service import ListingService
from core.database import get_db
from core.database.models import Account
from core.schemas import APIResponse
from core.security.auth import require_roles
from core.security.roles import Role
from core.services.email_service import EmailService, get_queued_email_service
from core.utils.serializers import serialize_model, serialize_models, paginate_response
from dealers.routes import get_dealer_service
from dealers.schemas import DealerOut, DealerData
from dealers.service import DealerService
from subscriptions.routes import get_subscription_service
from subscriptions.schemas import PlanOut, PlanCreate, PlanUpdate, DiscountRequest
from subscriptions.service import SubscriptionService
from .service import AdminService

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
router = APIRouter()

admin_only = require_roles(Role.ADMIN)

# ------------------------------ PYDANTIC MODELS ------------------------------

class AdminUserUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    roles: Optional[List[str]] = Field(None, description="Replaces the account's roles, e.g. [\"USER\", \"DEALER\"]")

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_admin_service(
    db: Session = Depends(get_db),
    email: EmailService = Depends(get_queued_email_service)
) -> AdminService:
    """Dependency to get AdminService instance."""
    return AdminService(db, email)

# ------------------------------ USER ENDPOINTS ------------------------------

@router.get("/users", response_model=APIResponse, tags=["Admin"])
async def list_users(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    admin: Account = Depends(admin_only),
    service: AdminService = Depends(get_admin_service)
) -> APIResponse:
    users, total = service.list_users(limit=limit, offset=offset)
    return APIResponse(success=True, data=paginate_response(users, total, AccountOut, limit, offset, items_key="users"))

@router.put("/users/{user_id}", response_model=APIResponse, tags=["Admin"])
async def update_user(
    payload: AdminUserUpdate,
    user_id: int = Path(..., description="Account ID"),
    admin: Account = Depends(admin_only),
    service: AdminService = Depends(get_admin_service)
) -> APIResponse:
    account = service.update_user(user_id, payload.model_dump(exclude_unset=True), admin)
    return APIResponse(success=True, data={"account": serialize_model(account, AccountOut)})

@router.delete("/users/{user_id}", response_model=APIResponse, tags=["Admin"])
async def delete_user(
    user_id: int = Path(..., description="Account ID"),
    admin: Account = Depends(admin_only),
    service: AdminService = Depends(get_admin_service)
) -> APIResponse:
    service.delete_user(user_id, admin)
    return APIResponse(success=True, data={"deleted": user_id})

# ------------------------------ LISTING ENDPOINTS ------------------------------

@router.get("/listings", response_model=APIResponse, tags=["Admin"])
async def list_listings(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    admin: Account = Depends(admin_only),
    service: AdminService = Depends(get_admin_service)
) -> APIResponse:
    listings, total = service.list_listings(limit=limit, offset=offset)
    return APIResponse(success=True, data=paginate_response(listings, total, ListingOut, limit, offset, items_key="listings"))

@router.put("/listings/{listing_id}", response_model=APIResponse, tags=["Admin"])
async def update_listing(
    payload: ListingUpdate,
    listing_id: int = Path(..., description="Listing ID"),
    admin: Account = Depends(admin_only),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    listing = service.update_listing(listing_id, payload.model_dump(exclude_unset=True), admin)
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

@router.delete("/listings/{listing_id}", response_model=APIResponse, tags=["Admin"])
async def delete_listing(
    listing_id: int = Path(..., description="Listing ID"),
    admin: Account = Depends(admin_only),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    service.delete_listing(listing_id, admin)
    return APIResponse(success=True, data={"deleted": listing_id})

# ------------------------------ DEALER ENDPOINTS ------------------------------

@router.get("/dealers", response_model=APIResponse, tags=["Admin"])
async def list_dealers(
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    admin: Account = Depends(admin_only),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    dealers, total = service.list_dealers(limit=limit, offset=offset)
    return APIResponse(success=True, data=paginate_response(dealers, total, DealerOut, limit, offset, items_key="dealers"))

@router.put("/dealers/{dealer_id}", response_model=APIResponse, tags=["Admin"])
async def update_dealer(
    payload: DealerData,
    dealer_id: int = Path(..., description="Dealer ID"),
    admin: Account = Depends(admin_only),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    dealer = service.update_dealer(dealer_id, payload.model_dump(exclude_unset=True), admin)
    return APIResponse(success=True, data={"dealer": serialize_model(dealer, DealerOut)})

@router.delete("/dealers/{dealer_id}", response_model=APIResponse, tags=["Admin"])
async def delete_dealer(
    dealer_id: int = Path(..., description="Dealer ID"),
    admin: Account = Depends(admin_only),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    removed = service.delete_dealer(dealer_id, admin)
    return APIResponse(success=True, data={"deleted": dealer_id, "listings_removed": removed})

# ------------------------------ PLAN ENDPOINTS ------------------------------

@router.get("/plans", response_model=APIResponse, tags=["Admin"])
async def list_plans(
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    return APIResponse(success=True, data={"plans": serialize_models(service.list_plans(), PlanOut)})

@router.post("/plans", response_model=APIResponse, tags=["Admin"])
async def create_plan(
    payload: PlanCreate,
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    plan = service.create_plan(payload.model_dump())
    return APIResponse(success=True, data={"plan": serialize_model(plan, PlanOut)})

@router.put("/plans/{plan_id}", response_model=APIResponse, tags=["Admin"])
async def update_plan(
    payload: PlanUpdate,
    plan_id: int = Path(..., description="Plan ID"),
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    plan = service.update_plan(plan_id, payload.model_dump(exclude_unset=True))
    return APIResponse(success=True, data={"plan": serialize_model(plan, PlanOut)})

@router.delete("/plans/{plan_id}", response_model=APIResponse, tags=["Admin"])
async def delete_plan(
    plan_id: int = Path(..., description="Plan ID"),
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    service.delete_plan(plan_id)
    return APIResponse(success=True, data={"deleted": plan_id})

@router.post("/plans/{plan_id}/discount", response_model=APIResponse, tags=["Admin"])
async def apply_discount(
    payload: DiscountRequest,
    plan_id: int = Path(..., description="Plan ID"),
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    plan = service.apply_discount(plan_id, payload.percent, payload.expiry)
    return APIResponse(success=True, data={"plan": serialize_model(plan, PlanOut)})

@router.delete("/plans/{plan_id}/discount", response_model=APIResponse, tags=["Admin"])
async def remove_discount(
    plan_id: int = Path(..., description="Plan ID"),
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    plan = service.remove_discount(plan_id)
    return APIResponse(success=True, data={"plan": serialize_model(plan, PlanOut)})

@router.post("/subscriptions/sweep", response_model=APIResponse, tags=["Admin"])
async def run_subscription_sweep(
    admin: Account = Depends(admin_only),
    service: SubscriptionService = Depends(get_subscription_service)
) -> APIResponse:
    """Run the renew/expire sweep now instead of waiting for the scheduler."""
    return APIResponse(success=True, data=service.run_sweep())

# ------------------------------ END OF FILE ------------------------------
