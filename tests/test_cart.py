from datetime import date, timedelta
from decimal import Decimal
from itertools import permutations

import pytest

from cart.service import CartService, calculate_subtotal, calculate_total
from core.database.models import CartItem, CartItemStatus, Listing, Payment, Subscription, UserSubscription
from core.exceptions import InvalidRequestError, NotAuthorizedError
from core.security.roles import Role
from core.utils.data_helpers import today


@pytest.fixture
def service(db, email):
    return CartService(db, email)


# ---- totals ----

def test_subtotal_does_not_depend_on_item_order():
    items = [
        CartItem(quantity=2, listing=Listing(price=Decimal("100.10"))),
        CartItem(quantity=1, listing=Listing(price=Decimal("0.05"))),
        CartItem(quantity=3, listing=Listing(price=Decimal("19.99"))),
    ]
    expected = Decimal("260.22")

    for ordering in permutations(items):
        assert calculate_subtotal(ordering) == expected
        assert calculate_total(ordering) == expected


def test_empty_cart_totals_zero():
    assert calculate_subtotal([]) == Decimal("0.00")


def test_plan_price_uses_discount_until_expiry():
    expiry = date(2030, 6, 1)
    plan = Subscription(name="Pro", price=Decimal("100.00"), discount=25, discount_expiry=expiry)
    item = CartItem(quantity=1, subscription=plan)

    assert item.unit_price(expiry - timedelta(days=1)) == Decimal("75.00")
    assert item.unit_price(expiry) == Decimal("100.00")


# ---- cart contents ----

def test_adding_same_listing_twice_creates_two_entries(service, make_account, make_listing):
    buyer = make_account("buyer")
    listing = make_listing(make_account("seller"), price="5000.00")

    service.add_to_cart(buyer, listing.id)
    service.add_to_cart(buyer, listing.id)

    assert len(service.get_cart_items(buyer)) == 2
    assert service.get_summary(buyer)["subtotal"] == Decimal("10000.00")


def test_update_quantity_and_zero_removes(db, service, make_account, make_listing):
    buyer = make_account("buyer")
    item = service.add_to_cart(buyer, make_listing(make_account("seller"), price="10.00").id)

    assert service.update_quantity(buyer, item.id, 3).quantity == 3
    assert service.get_summary(buyer)["total"] == Decimal("30.00")

    assert service.update_quantity(buyer, item.id, 0) is None
    assert db.query(CartItem).count() == 0


def test_save_for_later_and_restore(service, make_account, make_listing):
    buyer = make_account("buyer")
    cheap = service.add_to_cart(buyer, make_listing(make_account("s1"), price="10.00").id)
    service.add_to_cart(buyer, make_listing(make_account("s2"), price="20.00").id)

    service.save_for_later(buyer, cheap.id)
    summary = service.get_summary(buyer)
    assert [i.id for i in summary["saved"]] == [cheap.id]
    assert summary["subtotal"] == Decimal("20.00")

    restored = service.restore_from_saved(buyer, cheap.id)
    assert restored.status == CartItemStatus.ACTIVE
    assert service.get_summary(buyer)["subtotal"] == Decimal("30.00")

    with pytest.raises(InvalidRequestError):
        service.restore_from_saved(buyer, cheap.id)


def test_items_of_other_accounts_are_off_limits(service, make_account, make_listing):
    buyer = make_account("buyer")
    item = service.add_to_cart(buyer, make_listing(make_account("seller")).id)

    with pytest.raises(NotAuthorizedError):
        service.remove_from_cart(make_account("intruder"), item.id)


def test_plan_quantity_stays_at_one(db, service, make_account, make_plan):
    buyer = make_account("buyer")
    item = service.add_subscription_to_cart(buyer, make_plan(price="50.00").id)

    with pytest.raises(InvalidRequestError) as exc:
        service.update_quantity(buyer, item.id, 3)
    assert exc.value.error_code == "PLAN_QUANTITY"
    assert service.get_summary(buyer)["total"] == Decimal("50.00")

    payment = service.checkout(buyer)
    assert payment.amount == Decimal("50.00")
    assert db.query(UserSubscription).count() == 1


def test_plan_can_only_feature_own_listing(service, make_account, make_listing, make_plan):
    buyer = make_account("buyer")
    foreign = make_listing(make_account("seller"))

    with pytest.raises(NotAuthorizedError):
        service.add_subscription_to_cart(buyer, make_plan().id, listing_id=foreign.id)


# ---- checkout ----

def test_checkout_empty_cart(service, make_account):
    with pytest.raises(InvalidRequestError) as exc:
        service.checkout(make_account("buyer"))
    assert exc.value.error_code == "EMPTY_CART"


def test_checkout_starts_plan_and_features_listing(db, service, email, make_account, make_listing, make_plan):
    seller = make_account("seller")
    listing = make_listing(seller)
    plan = make_plan(price="49.00", duration_days=30)
    service.add_subscription_to_cart(seller, plan.id, listing_id=listing.id)

    payment = service.checkout(seller)

    assert payment.amount == Decimal("49.00")
    assert db.query(Payment).count() == 1
    assert service.get_cart_items(seller) == []

    user_subscription = db.query(UserSubscription).one()
    assert user_subscription.auto_renew is True
    assert user_subscription.expiry_date == today() + timedelta(days=30)
    assert seller.has_role(Role.DEALER)
    assert seller.subscription_id == plan.id

    db.refresh(listing)
    assert listing.is_featured
    assert listing.featured_active

    assert "Subscription confirmed" in email.subjects_for(seller.email)


def test_checkout_leaves_saved_items(service, make_account, make_listing):
    buyer = make_account("buyer")
    kept = service.add_to_cart(buyer, make_listing(make_account("s1"), price="10.00").id)
    service.add_to_cart(buyer, make_listing(make_account("s2"), price="20.00").id)
    service.save_for_later(buyer, kept.id)

    payment = service.checkout(buyer)

    assert payment.amount == Decimal("20.00")
    assert [i.id for i in service.get_saved_items(buyer)] == [kept.id]


# ---- http ----

def test_cart_endpoints(client, make_account, make_listing, auth_headers):
    buyer = make_account("buyer")
    listing = make_listing(make_account("seller"), price="1234.50")
    headers = auth_headers(buyer)

    added = client.post(f"/api/cart/listings/{listing.id}", headers=headers)
    assert added.status_code == 200
    item_id = added.json()["data"]["item"]["id"]

    updated = client.put(f"/api/cart/items/{item_id}", json={"quantity": 2}, headers=headers)
    assert updated.json()["data"]["total"] == 2469.0

    paid = client.post("/api/cart/checkout", headers=headers)
    assert paid.status_code == 200
    assert paid.json()["data"]["payment"]["amount"] == 2469.0
    assert client.get("/api/cart", headers=headers).json()["data"]["items"] == []
