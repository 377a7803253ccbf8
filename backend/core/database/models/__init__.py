# ------------------------------ IMPORTS ------------------------------
from .base import SellerType, CartItemStatus, RequestType, RequestStatus, PaymentStatus
from .account import Account, AccountInformation
from .listing import Listing, ListingImage, PLACEHOLDER_IMAGE
from .dealer import Dealer
from .cart import CartItem
from .quote_request import QuoteRequest
from .subscription import Subscription, UserSubscription
from .payment import Payment

__all__ = [
    "SellerType",
    "CartItemStatus",
    "RequestType",
    "RequestStatus",
    "PaymentStatus",
    "Account",
    "AccountInformation",
    "Listing",
    "ListingImage",
    "PLACEHOLDER_IMAGE",
    "Dealer",
    "CartItem",
    "QuoteRequest",
    "Subscription",
    "UserSubscription",
    "Payment",
]
