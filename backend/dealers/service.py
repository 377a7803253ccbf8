# ------------------------------ IMPORTS ------------------------------
from typing import Optional, List, Tuple, Dict, Any
import logging

from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.service import ListingService
from core.database import transaction
from core.database.models import Account, Dealer, Listing
from core.exceptions import NotFoundError, ConflictError, CascadeDeleteError
from core.security.auth import ensure_owner_or_admin
from core.utils.api_helpers import apply_updates, require_fields
from core.utils.data_helpers import like_pattern

logger = logging.getLogger(__name__)

DEALER_FIELDS = (
    "name", "description", "address", "phone", "email",
    "image_path", "latitude", "longitude",
)

# ------------------------------ SERVICE ------------------------------

class DealerService:
    """Dealer storefronts: one per account, owning that account's listings."""

    def __init__(self, db: Session):
        self.db = db
        self.listings = ListingService(db)

    def get_dealer(self, dealer_id: int) -> Dealer:
        dealer = self.db.get(Dealer, dealer_id)
        if not dealer:
            raise NotFoundError("Dealer", dealer_id)
        return dealer

    def find_by_owner(self, owner: Account) -> Optional[Dealer]:
        """The caller's dealer, or None when they have not registered one."""
        return self.db.query(Dealer).filter(Dealer.owner_id == owner.id).first()

    def list_dealers(self, query: Optional[str] = None, limit: int = 100, offset: int = 0) -> Tuple[List[Dealer], int]:
        q = self.db.query(Dealer)
        if query:
            pattern = like_pattern(query.strip())
            q = q.filter(or_(Dealer.name.ilike(pattern, escape="\\"), Dealer.address.ilike(pattern, escape="\\")))

        total = q.count()
        dealers = q.order_by(Dealer.name, Dealer.id).limit(limit).offset(offset).all()
        return dealers, total

    def create_or_update_dealer(self, owner: Account, data: Dict[str, Any], is_update: bool) -> Dealer:
        """Create the owner's dealer or update it.

        no dealer + create -> created
        no dealer + update -> NotFoundError
        has dealer + create -> ConflictError
        has dealer + update -> updated in place, same id
        """
        existing = self.find_by_owner(owner)

        if is_update:
            if existing is None:
                raise NotFoundError("Dealer", message=f"Account {owner.id} has no dealer to update")
            return self._update(existing, data)

        if existing is not None:
            raise ConflictError(
                "You already have a dealer",
                {"dealer_id": existing.id},
                error_code="DEALER_EXISTS"
            )

        require_fields(data, "name")
        dealer = Dealer(owner_id=owner.id)
        apply_updates(dealer, data, DEALER_FIELDS)

        try:
            with transaction(self.db):
                self.db.add(dealer)
                self.db.flush()
                self.listings.convert_to_dealer_listings(owner.id)
        except IntegrityError as e:
            logger.warning(f"Concurrent dealer creation for account {owner.id}: {e.orig}")
            raise ConflictError("You already have a dealer", error_code="DEALER_EXISTS") from e

        self.db.refresh(dealer)
        logger.info(f"Account {owner.id} created dealer {dealer.id}")
        return dealer

    def update_dealer(self, dealer_id: int, data: Dict[str, Any], caller: Account) -> Dealer:
        """Update a dealer by id, for its owner or an admin."""
        dealer = self.get_dealer(dealer_id)
        ensure_owner_or_admin(caller, dealer.owner_id, "dealer", dealer_id)
        return self._update(dealer, data)

    def _update(self, dealer: Dealer, data: Dict[str, Any]) -> Dealer:
        with transaction(self.db):
            changed = apply_updates(dealer, data, DEALER_FIELDS)
        logger.info(f"Updated dealer {dealer.id}: {changed}")
        return dealer

    def add_dealer_listing(self, owner: Account, data: Dict[str, Any]) -> Listing:
        """List a vehicle under the caller's dealer."""
        if self.find_by_owner(owner) is None:
            raise NotFoundError("Dealer", message="Register a dealer before adding listings")
        require_fields(data, "model", "price")
        return self.listings.add_listing(owner, data)

    # ------------------------------ DELETION ------------------------------

    def purge_dealer(self, dealer: Dealer) -> int:
        """Delete the owner's listings and then the dealer, inside the caller's transaction."""
        removed = self.listings.purge_seller_listings(dealer.owner_id)
        self.db.delete(dealer)
        self.db.flush()
        return removed

    def verify_deleted(self, dealer_id: int) -> None:
        """Raise if a dealer that was just deleted can still be read back."""
        if self.db.query(Dealer.id).filter(Dealer.id == dealer_id).first() is not None:
            raise CascadeDeleteError(
                f"Dealer {dealer_id} still exists after delete",
                {"dealer_id": dealer_id}
            )

    def delete_dealer(self, dealer_id: int, caller: Account) -> int:
        """Delete a dealer and every listing of its owner. Returns the number of listings removed."""
        dealer = self.get_dealer(dealer_id)
        ensure_owner_or_admin(caller, dealer.owner_id, "dealer", dealer_id)

        with transaction(self.db):
            removed = self.purge_dealer(dealer)

        self.verify_deleted(dealer_id)
        logger.info(f"Account {caller.id} deleted dealer {dealer_id} and {removed} listings")
        return removed

    def get_dealer_listings(self, dealer: Dealer) -> List[Listing]:
        return (
            self.db.query(Listing)
            .filter(Listing.seller_id == dealer.owner_id)
            .order_by(desc(Listing.is_featured), desc(Listing.created_at), desc(Listing.id))
            .all()
        )

# ------------------------------ END OF FILE ------------------------------
