# ------------------------------ IMPORTS ------------------------------
from typing import Optional, List
import logging

from sqlalchemy import desc, or_, func
from sqlalchemy.orm import Session

from core.database import transaction
from core.database.models import (
    Account,
    Dealer,
    Listing,
    QuoteRequest,
    RequestStatus,
    RequestType,
    SellerType,
)
from core.exceptions import NotFoundError, ConflictError, InvalidRequestError, NotAuthorizedError
from core.security.auth import ensure_owner_or_admin
from core.services.email_service import EmailService

logger = logging.getLogger(__name__)

# ------------------------------ SERVICE ------------------------------

class MessageService:
    """Buyer/seller exchange: private messages and dealer quote requests.

    Every request starts PENDING and is answered once, which moves it to
    RESPONDED. Notifications go out after the change is committed.
    """

    def __init__(self, db: Session, email: EmailService):
        self.db = db
        self.email = email

    def get_request(self, request_id: int) -> QuoteRequest:
        request = self.db.get(QuoteRequest, request_id)
        if not request:
            raise NotFoundError("Request", request_id)
        return request

    def _get_listing(self, listing_id: int) -> Listing:
        listing = self.db.get(Listing, listing_id)
        if not listing:
            raise NotFoundError("Listing", listing_id)
        return listing

    @staticmethod
    def _require_text(text: Optional[str], field: str) -> str:
        if not text or not text.strip():
            raise InvalidRequestError(f"{field.capitalize()} must not be empty", {"field": field})
        return text.strip()

    # ------------------------------ PRIVATE MESSAGES ------------------------------

    def create_private_message(self, sender: Account, listing_id: int, text: str) -> QuoteRequest:
        """Send a message to the seller of a private listing."""
        text = self._require_text(text, "message")
        listing = self._get_listing(listing_id)

        if listing.seller_type != SellerType.PRIVATE:
            raise InvalidRequestError(
                "Private messages can only be sent about private listings",
                {"listing_id": listing_id},
                error_code="NOT_PRIVATE_LISTING"
            )
        if listing.seller_id == sender.id:
            raise InvalidRequestError("You cannot message yourself about your own listing")

        request = QuoteRequest(
            listing_id=listing.id,
            account_id=sender.id,
            request_type=RequestType.PRIVATE,
            status=RequestStatus.PENDING,
            requester_email=sender.email,
            recipient_email=listing.seller.email,
            message=text,
        )
        with transaction(self.db):
            self.db.add(request)
        self.db.refresh(request)

        logger.info(f"Account {sender.id} messaged seller {listing.seller_id} about listing {listing.id}")
        self.email.send_private_message(request.recipient_email, listing.title, text)
        return request

    def respond_to_private_message(self, request_id: int, responder: Account, text: str) -> QuoteRequest:
        """Answer a pending private message; either party in the exchange may answer."""
        text = self._require_text(text, "response")
        request = self.get_request(request_id)

        if request.request_type != RequestType.PRIVATE:
            raise InvalidRequestError("Request is not a private message", {"request_id": request_id})

        is_sender = request.account_id is not None and request.account_id == responder.id
        is_recipient = bool(request.recipient_email) and request.recipient_email.lower() == responder.email.lower()
        if not (is_sender or is_recipient):
            raise NotAuthorizedError("You are not part of this conversation", {"request_id": request_id})

        with transaction(self.db):
            request.mark_responded(text)

        notify = request.requester_email if is_recipient else request.recipient_email
        logger.info(f"Account {responder.id} responded to private message {request_id}")
        self.email.send_private_message_response(notify, request.listing.title, text)
        return request

    def get_messages_for_user(self, account: Account) -> List[QuoteRequest]:
        """Private messages the account sent or received."""
        return (
            self.db.query(QuoteRequest)
            .filter(
                QuoteRequest.request_type == RequestType.PRIVATE,
                or_(
                    QuoteRequest.account_id == account.id,
                    func.lower(QuoteRequest.recipient_email) == account.email.lower(),
                ),
            )
            .order_by(desc(QuoteRequest.request_date), desc(QuoteRequest.id))
            .all()
        )

    # ------------------------------ DEALER QUOTES ------------------------------

    def request_quote(
        self,
        requester: Optional[Account],
        listing_id: int,
        email: Optional[str] = None,
        message: Optional[str] = None
    ) -> QuoteRequest:
        """Ask the dealer selling a listing for a quote. Anonymous visitors must leave an email."""
        listing = self._get_listing(listing_id)

        if listing.seller_type != SellerType.DEALER:
            raise InvalidRequestError(
                "Quotes can only be requested for dealer listings",
                {"listing_id": listing_id},
                error_code="NOT_DEALER_LISTING"
            )
        dealer = self.db.query(Dealer).filter(Dealer.owner_id == listing.seller_id).first()
        if dealer is None:
            raise InvalidRequestError(
                "This listing is not associated with a dealer",
                {"listing_id": listing_id},
                error_code="NOT_DEALER_LISTING"
            )

        requester_email = requester.email if requester else (email or "").strip()
        if not requester_email:
            raise InvalidRequestError("An email address is required to request a quote", {"field": "email"})
        if requester and requester.id == listing.seller_id:
            raise InvalidRequestError("You cannot request a quote for your own listing")

        if requester:
            same_requester = QuoteRequest.account_id == requester.id
        else:
            same_requester = func.lower(QuoteRequest.requester_email) == requester_email.lower()

        duplicate = self.db.query(QuoteRequest.id).filter(
            QuoteRequest.listing_id == listing.id,
            QuoteRequest.request_type == RequestType.DEALER_QUOTE,
            QuoteRequest.status == RequestStatus.PENDING,
            same_requester,
        ).first()
        if duplicate:
            raise ConflictError(
                "You already have a pending quote request for this listing",
                {"request_id": duplicate.id},
                error_code="DUPLICATE_REQUEST"
            )

        request = QuoteRequest(
            listing_id=listing.id,
            account_id=requester.id if requester else None,
            dealer_id=dealer.id,
            request_type=RequestType.DEALER_QUOTE,
            status=RequestStatus.PENDING,
            requester_email=requester_email,
            recipient_email=dealer.email or listing.seller.email,
            message=(message or "").strip() or None,
        )
        with transaction(self.db):
            self.db.add(request)
        self.db.refresh(request)

        logger.info(f"Quote request {request.id} for listing {listing.id} sent to dealer {dealer.id}")
        self.email.send_quote_request(request.recipient_email, listing.title, requester_email)
        return request

    def list_dealer_requests(self, dealer_id: int, caller: Account) -> List[QuoteRequest]:
        dealer = self.db.get(Dealer, dealer_id)
        if not dealer:
            raise NotFoundError("Dealer", dealer_id)
        ensure_owner_or_admin(caller, dealer.owner_id, "dealer", dealer_id)

        return (
            self.db.query(QuoteRequest)
            .filter(QuoteRequest.dealer_id == dealer.id, QuoteRequest.request_type == RequestType.DEALER_QUOTE)
            .order_by(desc(QuoteRequest.request_date), desc(QuoteRequest.id))
            .all()
        )

    def get_quotes_for_user(self, account: Account) -> List[QuoteRequest]:
        return (
            self.db.query(QuoteRequest)
            .filter(QuoteRequest.account_id == account.id, QuoteRequest.request_type == RequestType.DEALER_QUOTE)
            .order_by(desc(QuoteRequest.request_date), desc(QuoteRequest.id))
            .all()
        )

    def respond_to_quote(self, request_id: int, responder: Account, text: str) -> QuoteRequest:
        """Dealer owner answers a pending quote request."""
        text = self._require_text(text, "response")
        request = self.get_request(request_id)

        if request.request_type != RequestType.DEALER_QUOTE or request.dealer is None:
            raise InvalidRequestError("Request is not a dealer quote", {"request_id": request_id})
        if request.dealer.owner_id != responder.id:
            raise NotAuthorizedError("Only the dealer can answer this request", {"request_id": request_id})

        with transaction(self.db):
            request.mark_responded(text)

        logger.info(f"Dealer {request.dealer_id} responded to quote request {request_id}")
        self.email.send_quote_response(request.requester_email, request.listing.title, text)
        return request

    # ------------------------------ CLEANUP ------------------------------

    def purge_sent_requests(self, account_id: int) -> int:
        """Delete requests an account sent, inside the caller's transaction."""
        requests = self.db.query(QuoteRequest).filter(QuoteRequest.account_id == account_id).all()
        for request in requests:
            self.db.delete(request)
        self.db.flush()
        return len(requests)

# ------------------------------ END OF FILE ------------------------------
