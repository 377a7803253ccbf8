# ------------------------------ IMPORTS ------------------------------
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, List, Tuple, Dict, Any
import logging

from sqlalchemy import desc, func, or_, and_
from sqlalchemy.orm import Session

from core.database import transaction
from core.database.models import (
    Account,
    Dealer,
    Listing,
    ListingImage,
    SellerType,
    UserSubscription,
    PLACEHOLDER_IMAGE,
)
from core.exceptions import NotFoundError, ConflictError, InvalidRequestError, NotAuthorizedError
from core.security.auth import ensure_owner_or_admin
from core.utils.api_helpers import apply_updates, require_fields
from core.utils.data_helpers import utcnow, search_terms, like_pattern

logger = logging.getLogger(__name__)

LISTING_FIELDS = (
    "name", "description", "price", "image_url", "category", "brand",
    "model", "mileage", "year", "fuel_type", "transmission",
)

# ------------------------------ SERVICE ------------------------------

class ListingService:
    """Listing maintenance, search and featured highlights."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------ LOOKUPS ------------------------------

    def get_listing(self, listing_id: int) -> Listing:
        listing = self.db.get(Listing, listing_id)
        if not listing:
            raise NotFoundError("Listing", listing_id)
        return listing

    def get_private_listing(self, seller: Account) -> Optional[Listing]:
        """The single listing a private seller may own, if any."""
        return (
            self.db.query(Listing)
            .filter(Listing.seller_id == seller.id, Listing.seller_type == SellerType.PRIVATE)
            .first()
        )

    def get_seller_listings(self, seller_id: int) -> List[Listing]:
        return (
            self.db.query(Listing)
            .filter(Listing.seller_id == seller_id)
            .order_by(desc(Listing.created_at), desc(Listing.id))
            .all()
        )

    # ------------------------------ MUTATIONS ------------------------------

    def add_listing(self, seller: Account, data: Dict[str, Any]) -> Listing:
        """Create a listing for the seller.

        Sellers that own a dealer list as DEALER, everyone else as PRIVATE, and a
        private seller may only hold one listing. The seller row is locked for the
        duration of the check so concurrent adds by one seller run one at a time.
        """
        require_fields(data, "price")
        values = {name: data[name] for name in LISTING_FIELDS if data.get(name) is not None}

        with transaction(self.db):
            self.db.query(Account).filter(Account.id == seller.id).with_for_update().one()

            has_dealer = self.db.query(Dealer.id).filter(Dealer.owner_id == seller.id).first() is not None
            seller_type = SellerType.DEALER if has_dealer else SellerType.PRIVATE

            if seller_type == SellerType.PRIVATE:
                existing = self.db.query(Listing.id).filter(Listing.seller_id == seller.id).first()
                if existing:
                    raise ConflictError(
                        "Private sellers can only list one vehicle",
                        {"listing_id": existing.id},
                        error_code="ALREADY_HAS_CAR"
                    )

            listing = Listing(seller_id=seller.id, seller_type=seller_type, **values)
            if not listing.image_url:
                listing.image_url = PLACEHOLDER_IMAGE
            self.db.add(listing)

        self.db.refresh(listing)
        logger.info(f"Account {seller.id} added {seller_type.value} listing {listing.id}")
        return listing

    def update_listing(self, listing_id: int, data: Dict[str, Any], caller: Account) -> Listing:
        listing = self.get_listing(listing_id)
        ensure_owner_or_admin(caller, listing.seller_id, "listing", listing_id)

        with transaction(self.db):
            changed = apply_updates(listing, data, LISTING_FIELDS)

        logger.info(f"Account {caller.id} updated listing {listing_id}: {changed}")
        return listing

    def delete_listing(self, listing_id: int, caller: Account) -> None:
        """Delete a listing with its images and the requests that reference it."""
        listing = self.get_listing(listing_id)
        ensure_owner_or_admin(caller, listing.seller_id, "listing", listing_id)

        with transaction(self.db):
            self.db.delete(listing)

        logger.info(f"Account {caller.id} deleted listing {listing_id}")

    def purge_seller_listings(self, seller_id: int) -> int:
        """Delete every listing of a seller inside the caller's transaction."""
        listings = self.db.query(Listing).filter(Listing.seller_id == seller_id).all()
        for listing in listings:
            self.db.delete(listing)
        self.db.flush()
        return len(listings)

    def convert_to_dealer_listings(self, seller_id: int) -> int:
        """Retag a seller's private listings as dealer listings inside the caller's transaction."""
        listings = (
            self.db.query(Listing)
            .filter(Listing.seller_id == seller_id, Listing.seller_type == SellerType.PRIVATE)
            .all()
        )
        for listing in listings:
            listing.seller_type = SellerType.DEALER
        self.db.flush()
        return len(listings)

    # ------------------------------ IMAGES ------------------------------

    def add_listing_image(self, listing_id: int, caller: Account, url: str, content_type: Optional[str] = None) -> ListingImage:
        listing = self.get_listing(listing_id)
        ensure_owner_or_admin(caller, listing.seller_id, "listing", listing_id)

        image = ListingImage(listing_id=listing.id, url=url, content_type=content_type)
        with transaction(self.db):
            self.db.add(image)
        self.db.refresh(image)
        return image

    def delete_listing_image(self, image_id: int, caller: Account) -> None:
        image = self.db.get(ListingImage, image_id)
        if not image:
            raise NotFoundError("Image", image_id)
        ensure_owner_or_admin(caller, image.listing.seller_id, "image", image_id)

        with transaction(self.db):
            self.db.delete(image)

    # ------------------------------ FEATURED ------------------------------

    def _featured_limit(self, seller_id: int) -> Optional[int]:
        """Largest featured-car allowance across the seller's current subscriptions."""
        subscriptions = (
            self.db.query(UserSubscription)
            .filter(UserSubscription.account_id == seller_id, UserSubscription.active.is_(True))
            .all()
        )
        limits = [s.subscription.max_featured_cars for s in subscriptions if s.is_current()]
        return max(limits) if limits else None

    def highlight_listing(self, listing_id: int, caller: Account, days: int, now: Optional[datetime] = None) -> Listing:
        """Feature a listing for a number of days, within the owner's plan allowance."""
        if days is None or days <= 0:
            raise InvalidRequestError("Highlight duration must be a positive number of days", {"days": days})

        listing = self.get_listing(listing_id)
        ensure_owner_or_admin(caller, listing.seller_id, "listing", listing_id)
        now = now or utcnow()

        if not caller.is_admin:
            limit = self._featured_limit(listing.seller_id)
            if limit is None:
                raise NotAuthorizedError(
                    "An active subscription is required to feature listings",
                    error_code="SUBSCRIPTION_REQUIRED"
                )
            featured = [
                other for other in self.get_seller_listings(listing.seller_id)
                if other.id != listing.id and other.is_featured_active(now)
            ]
            if len(featured) >= limit:
                raise ConflictError(
                    "Featured listing limit reached for your subscription",
                    {"limit": limit},
                    error_code="FEATURED_LIMIT_REACHED"
                )

        with transaction(self.db):
            listing.is_featured = True
            listing.featured_until = now + timedelta(days=days)

        logger.info(f"Listing {listing_id} featured until {listing.featured_until}")
        return listing

    def remove_highlight(self, listing_id: int, caller: Account) -> Listing:
        listing = self.get_listing(listing_id)
        ensure_owner_or_admin(caller, listing.seller_id, "listing", listing_id)

        with transaction(self.db):
            listing.is_featured = False
            listing.featured_until = None
        return listing

    # ------------------------------ SEARCH ------------------------------

    def find_by_filters(
        self,
        category: Optional[str] = None,
        brand: Optional[str] = None,
        model: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_mileage: Optional[int] = None,
        max_mileage: Optional[int] = None,
        min_year: Optional[int] = None,
        max_year: Optional[int] = None,
        fuel_type: Optional[str] = None,
        transmission: Optional[str] = None,
        query: Optional[str] = None,
        featured_only: bool = False,
        limit: int = 100,
        offset: int = 0,
        now: Optional[datetime] = None
    ) -> Tuple[List[Listing], int]:
        """Listings matching every supplied constraint; missing ones match anything."""
        q = self.db.query(Listing)

        for column, value in (
            (Listing.category, category),
            (Listing.brand, brand),
            (Listing.model, model),
            (Listing.fuel_type, fuel_type),
            (Listing.transmission, transmission),
        ):
            if value:
                q = q.filter(func.lower(column) == value.strip().lower())

        if min_price is not None:
            q = q.filter(Listing.price >= min_price)
        if max_price is not None:
            q = q.filter(Listing.price <= max_price)
        if min_mileage is not None:
            q = q.filter(Listing.mileage >= min_mileage)
        if max_mileage is not None:
            q = q.filter(Listing.mileage <= max_mileage)
        if min_year is not None:
            q = q.filter(Listing.year >= min_year)
        if max_year is not None:
            q = q.filter(Listing.year <= max_year)

        for term in search_terms(query):
            pattern = like_pattern(term)
            q = q.filter(or_(
                Listing.name.ilike(pattern, escape="\\"),
                Listing.description.ilike(pattern, escape="\\"),
                Listing.brand.ilike(pattern, escape="\\"),
                Listing.model.ilike(pattern, escape="\\"),
            ))

        if featured_only:
            q = q.filter(and_(
                Listing.is_featured.is_(True),
                or_(Listing.featured_until.is_(None), Listing.featured_until > (now or utcnow())),
            ))

        total = q.count()
        listings = q.order_by(desc(Listing.created_at), desc(Listing.id)).limit(limit).offset(offset).all()
        return listings, total

    # ------------------------------ FACETS ------------------------------

    def _distinct(self, column, *criteria) -> List[str]:
        rows = (
            self.db.query(column)
            .filter(column.isnot(None), column != "", *criteria)
            .distinct()
            .order_by(column)
            .all()
        )
        return [row[0] for row in rows]

    def list_categories(self) -> List[str]:
        return self._distinct(Listing.category)

    def list_brands(self) -> List[str]:
        return self._distinct(Listing.brand)

    def list_models(self, brand: str) -> List[str]:
        return self._distinct(Listing.model, func.lower(Listing.brand) == brand.strip().lower())

    def list_fuel_types(self) -> List[str]:
        return self._distinct(Listing.fuel_type)

    def list_transmissions(self) -> List[str]:
        return self._distinct(Listing.transmission)

# ------------------------------ END OF FILE ------------------------------
