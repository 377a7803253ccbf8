# ------------------------------ IMPORTS ------------------------------
from fastapi import APIRouter, Query, Depends, Path
from typing import Optional
from decimal import Decimal
import logging

from sqlalchemy.orm import Session

from core.database import get_db
from core.database.models import Account
from core.exceptions import InvalidRequestError
from core.schemas import APIResponse
from core.security.auth import get_current_account, require_roles
from core.security.roles import Role
from core.utils.serializers import serialize_model, serialize_models, paginate_response
from .service import ListingService
from .schemas import ListingOut, ListingImageOut, ListingCreate, ListingUpdate, HighlightRequest, ImageCreate

logger = logging.getLogger(__name__)

# ------------------------------ ROUTER SETUP ------------------------------
router = APIRouter()
private_router = APIRouter()

# ------------------------------ DEPENDENCY INJECTION ------------------------------

def get_listing_service(db: Session = Depends(get_db)) -> ListingService:
    """Dependency to get ListingService instance."""
    return ListingService(db)

# ------------------------------ BROWSE ENDPOINTS ------------------------------

@router.get("", response_model=APIResponse, tags=["Listings"])
async def search_listings(
    category: Optional[str] = Query(None, description="Category, case-insensitive"),
    brand: Optional[str] = Query(None, description="Brand, case-insensitive"),
    model: Optional[str] = Query(None, description="Model, case-insensitive"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    min_mileage: Optional[int] = Query(None, ge=0),
    max_mileage: Optional[int] = Query(None, ge=0),
    min_year: Optional[int] = Query(None),
    max_year: Optional[int] = Query(None),
    fuel_type: Optional[str] = Query(None),
    transmission: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Free text matched against name, description, brand and model"),
    featured: bool = Query(False, description="Only listings that are currently featured"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of results"),
    offset: int = Query(0, ge=0, description="Number of results to skip"),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    """Search listings with filtering and pagination."""
    for low, high, name in ((min_price, max_price, "price"), (min_mileage, max_mileage, "mileage"), (min_year, max_year, "year")):
        if low is not None and high is not None and low > high:
            raise InvalidRequestError(f"min_{name} must be less than or equal to max_{name}")

    listings, total = service.find_by_filters(
        category=category,
        brand=brand,
        model=model,
        min_price=min_price,
        max_price=max_price,
        min_mileage=min_mileage,
        max_mileage=max_mileage,
        min_year=min_year,
        max_year=max_year,
        fuel_type=fuel_type,
        transmission=transmission,
        query=q,
        featured_only=featured,
        limit=limit,
        offset=offset
    )

    return APIResponse(
        success=True,
        data=paginate_response(listings, total, ListingOut, limit, offset, items_key="listings")
    )

@router.get("/facets", response_model=APIResponse, tags=["Listings"])
async def get_facets(
    brand: Optional[str] = Query(None, description="Brand to list models for"),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    """Distinct values for the search filters."""
    data = {
        "categories": service.list_categories(),
        "brands": service.list_brands(),
        "fuel_types": service.list_fuel_types(),
        "transmissions": service.list_transmissions(),
    }
    if brand:
        data["models"] = service.list_models(brand)
    return APIResponse(success=True, data=data)

@router.get("/{listing_id}", response_model=APIResponse, tags=["Listings"])
async def get_listing(
    listing_id: int = Path(..., description="Listing ID"),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    listing = service.get_listing(listing_id)
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

# ------------------------------ OWNER ENDPOINTS ------------------------------

@router.put("/{listing_id}", response_model=APIResponse, tags=["Listings"])
async def update_listing(
    payload: ListingUpdate,
    listing_id: int = Path(..., description="Listing ID"),
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    """Update a listing owned by the caller."""
    listing = service.update_listing(listing_id, payload.model_dump(exclude_unset=True), account)
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

@router.delete("/{listing_id}", response_model=APIResponse, tags=["Listings"])
async def delete_listing(
    listing_id: int = Path(..., description="Listing ID"),
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    service.delete_listing(listing_id, account)
    return APIResponse(success=True, data={"deleted": listing_id})

@router.post("/{listing_id}/highlight", response_model=APIResponse, tags=["Listings"])
async def highlight_listing(
    payload: HighlightRequest,
    listing_id: int = Path(..., description="Listing ID"),
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    """Feature a listing for a number of days."""
    listing = service.highlight_listing(listing_id, account, payload.days)
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

@router.delete("/{listing_id}/highlight", response_model=APIResponse, tags=["Listings"])
async def remove_highlight(
    listing_id: int = Path(..., description="Listing ID"),
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    listing = service.remove_highlight(listing_id, account)
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

@router.post("/{listing_id}/images", response_model=APIResponse, tags=["Listings"])
async def add_listing_image(
    payload: ImageCreate,
    listing_id: int = Path(..., description="Listing ID"),
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    image = service.add_listing_image(listing_id, account, payload.url, payload.content_type)
    return APIResponse(success=True, data={"image": serialize_model(image, ListingImageOut)})

@router.delete("/images/{image_id}", response_model=APIResponse, tags=["Listings"])
async def delete_listing_image(
    image_id: int = Path(..., description="Image ID"),
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    service.delete_listing_image(image_id, account)
    return APIResponse(success=True, data={"deleted": image_id})

# ------------------------------ PRIVATE SELLER ENDPOINTS ------------------------------

@private_router.get("/listing", response_model=APIResponse, tags=["Private sellers"])
async def get_private_listing(
    account: Account = Depends(require_roles(Role.PRIVATE)),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    """The caller's private listing, or null."""
    listing = service.get_private_listing(account)
    return APIResponse(
        success=True,
        data={"listing": serialize_model(listing, ListingOut) if listing else None}
    )

@private_router.post("/listing", response_model=APIResponse, tags=["Private sellers"])
async def add_private_listing(
    payload: ListingCreate,
    account: Account = Depends(require_roles(Role.PRIVATE)),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    """List the caller's one private vehicle."""
    listing = service.add_listing(account, payload.model_dump(exclude_unset=True))
    return APIResponse(success=True, data={"listing": serialize_model(listing, ListingOut)})

@private_router.get("/listings", response_model=APIResponse, tags=["Private sellers"])
async def get_own_listings(
    account: Account = Depends(get_current_account),
    service: ListingService = Depends(get_listing_service)
) -> APIResponse:
    listings = service.get_seller_listings(account.id)
    return APIResponse(success=True, data={"listings": serialize_models(listings, ListingOut)})

# ------------------------------ END OF FILE ------------------------------
