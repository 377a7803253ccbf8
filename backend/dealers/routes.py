# ------------------------------ IMPORTS ------------------------------
from fastapi import APIRouter, Query, Depends, Path
from typing import Optional
import logging

from sqlalchemy.orm import Session

from catalog.schemas import ListingOut, ListingCreate
from core.database import get_db
from core.database.models import Account
from core.schemas import APIResponse
from core.security.auth import get_current_account, require_roles
from core.security.roles import Role
from core.utils.serializers import serialize_model, serialize_models, paginate_response
from messages.routes import get_message_service
from messages.schemas import QuoteRequestOut
from messages.service import MessageService
from .service import DealerService
from .schemas import DealerOut, DealerDetailOut, DealerData

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
router = APIRouter()

dealer_owner = require_roles(Role.DEALER, Role.ADMIN)

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_dealer_service(db: Session = Depends(get_db)) -> DealerService:
    """Dependency to get DealerService instance."""
    return DealerService(db)

# ------------------------------ OWNER ENDPOINTS ------------------------------

@router.get("/me", response_model=APIResponse, tags=["Dealers"])
async def get_my_dealer(
    account: Account = Depends(dealer_owner),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    """The caller's dealer, or null when none is registered."""
    dealer = service.find_by_owner(account)
    return APIResponse(
        success=True,
        data={"dealer": serialize_model(dealer, DealerDetailOut) if dealer else None}
    )

@router.post("/me", response_model=APIResponse, tags=["Dealers"])
async def create_dealer(
    payload: DealerData,
    account: Account = Depends(dealer_owner),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    dealer = service.create_or_update_dealer(account, payload.model_dump(exclude_unset=True), is_update=False)
    return APIResponse(success=True, data={"dealer": serialize_model(dealer, DealerOut)})

@router.put("/me", response_model=APIResponse, tags=["Dealers"])
async def update_my_dealer(
    payload: DealerData,
    account: Account = Depends(dealer_owner),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    dealer = service.create_or_update_dealer(account, payload.model_dump(exclude_unset=True), is_update=True)
    return APIResponse(success=True, data={"dealer": serialize_model(dealer, DealerOut)})

@router.post("/me/listings", response_model=APIResponse, tags=["Dealers"])
async def add_dealer_listing(
    payload: ListingCreate,
    account: Account = Depends(dealer_owner),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    """List a vehicle under the caller's dealer."""
    listing = service.add_dealer_listing(account, payload.model_dump(exclude_unset=True))
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

# ------------------------------ BROWSE ENDPOINTS ------------------------------

@router.get("", response_model=APIResponse, tags=["Dealers"])
async def list_dealers(
    q: Optional[str] = Query(None, description="Match on dealer name or address"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of results"),
    offset: int = Query(0, ge=0, description="Number of results to skip"),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    dealers, total = service.list_dealers(query=q, limit=limit, offset=offset)
    return APIResponse(
        success=True,
        data=paginate_response(dealers, total, DealerOut, limit, offset, items_key="dealers")
    )

@router.get("/{dealer_id}", response_model=APIResponse, tags=["Dealers"])
async def get_dealer(
    dealer_id: int = Path(..., description="Dealer ID"),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    """Dealer storefront with its listings."""
    dealer = service.get_dealer(dealer_id)
    data = serialize_model(dealer, DealerOut)
    data["listings"] = serialize_models(service.get_dealer_listings(dealer), ListingOut)
    return APIResponse(success=True, data={"dealer": data})

@router.put("/{dealer_id}", response_model=APIResponse, tags=["Dealers"])
async def update_dealer(
    payload: DealerData,
    dealer_id: int = Path(..., description="Dealer ID"),
    account: Account = Depends(get_current_account),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    dealer = service.update_dealer(dealer_id, payload.model_dump(exclude_unset=True), account)
    return APIResponse(success=True, data={"dealer": serialize_model(dealer, DealerOut)})

@router.delete("/{dealer_id}", response_model=APIResponse, tags=["Dealers"])
async def delete_dealer(
    dealer_id: int = Path(..., description="Dealer ID"),
    account: Account = Depends(get_current_account),
    service: DealerService = Depends(get_dealer_service)
) -> APIResponse:
    """Delete a dealer together with every listing of its owner."""
    removed = service.delete_dealer(dealer_id, account)
    return APIResponse(success=True, data={"deleted": dealer_id, "listings_removed": removed})

@router.get("/{dealer_id}/quotes", response_model=APIResponse, tags=["Dealers"])
async def get_dealer_quotes(
    dealer_id: int = Path(..., description="Dealer ID"),
    account: Account = Depends(get_current_account),
    service: MessageService = Depends(get_message_service)
) -> APIResponse:
    """Quote requests addressed to the dealer, for its owner."""
    quotes = service.list_dealer_requests(dealer_id, account)
    return APIResponse(success=True, data={"quotes": serialize_models(quotes, QuoteRequestOut)})

# ------------------------------ END OF FILE ------------------------------
