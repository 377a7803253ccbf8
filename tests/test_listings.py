from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from cart.service import CartService
from catalog.service import ListingService
from core.database.models import CartItem, Listing, QuoteRequest, SellerType
from core.exceptions import ConflictError, InvalidRequestError, NotAuthorizedError, NotFoundError
from core.security.roles import Role
from messages.service import MessageService


@pytest.fixture
def service(db):
    return ListingService(db)


# ---- adding listings ----

def test_private_seller_can_only_list_one_vehicle(service, make_account):
    seller = make_account("seller", roles=(Role.USER, Role.PRIVATE))

    first = service.add_listing(seller, {"brand": "Volvo", "model": "V70", "price": Decimal("5000")})
    assert first.seller_type == SellerType.PRIVATE
    assert first.image_url == "/images/placeholder.png"

    with pytest.raises(ConflictError) as exc:
        service.add_listing(seller, {"brand": "Saab", "model": "900", "price": Decimal("3000")})
    assert exc.value.error_code == "ALREADY_HAS_CAR"
    assert len(service.get_seller_listings(seller.id)) == 1


def test_dealer_owner_lists_as_dealer_without_limit(service, make_account, make_dealer):
    owner = make_account("dealer", roles=(Role.USER, Role.DEALER))
    make_dealer(owner)

    for model in ("Golf", "Passat", "Polo"):
        listing = service.add_listing(owner, {"brand": "VW", "model": model, "price": Decimal("15000")})
        assert listing.seller_type == SellerType.DEALER

    assert len(service.get_seller_listings(owner.id)) == 3


def test_listing_requires_price(service, make_account):
    seller = make_account("seller")
    with pytest.raises(InvalidRequestError):
        service.add_listing(seller, {"brand": "Volvo"})


def test_update_keeps_blank_fields_and_checks_owner(service, make_account, make_listing):
    seller = make_account("seller")
    other = make_account("other")
    listing = make_listing(seller, brand="Volvo", model="V70")

    updated = service.update_listing(listing.id, {"brand": "  ", "model": "V90", "mileage": 1200}, seller)
    assert updated.brand == "Volvo"
    assert updated.model == "V90"
    assert updated.mileage == 1200

    with pytest.raises(NotAuthorizedError):
        service.update_listing(listing.id, {"model": "XC60"}, other)


def test_admin_may_update_any_listing(service, make_account, make_listing):
    admin = make_account("admin", roles=(Role.ADMIN,))
    listing = make_listing(make_account("seller"), brand="Volvo")

    assert service.update_listing(listing.id, {"brand": "Saab"}, admin).brand == "Saab"


def test_get_missing_listing(service):
    with pytest.raises(NotFoundError):
        service.get_listing(999)


# ---- search ----

@pytest.fixture
def catalog(make_account, make_listing):
    sellers = [make_account(f"seller{i}") for i in range(3)]
    return [
        make_listing(sellers[0], price="8000.00", brand="Volvo", model="V70", category="Estate",
                     mileage=150000, year=2009, fuel_type="Diesel", name="Tidy family estate"),
        make_listing(sellers[1], price="22000.00", brand="Tesla", model="Model 3", category="Sedan",
                     mileage=40000, year=2020, fuel_type="Electric", description="One owner, long range"),
        make_listing(sellers[2], price="12500.00", brand="volvo", model="XC60", category="SUV",
                     mileage=90000, year=2016, fuel_type="Petrol"),
    ]


def test_no_filters_returns_everything(service, catalog):
    listings, total = service.find_by_filters()
    assert total == 3
    assert {listing.id for listing in listings} == {listing.id for listing in catalog}


def test_brand_filter_is_case_insensitive(service, catalog):
    listings, total = service.find_by_filters(brand="VOLVO")
    assert total == 2
    assert {listing.model for listing in listings} == {"V70", "XC60"}


def test_range_filters_are_inclusive(service, catalog):
    listings, _ = service.find_by_filters(min_price=Decimal("8000"), max_price=Decimal("12500"))
    assert {listing.model for listing in listings} == {"V70", "XC60"}

    listings, _ = service.find_by_filters(min_year=2016, max_mileage=90000)
    assert {listing.model for listing in listings} == {"Model 3", "XC60"}


def test_combined_filters(service, catalog):
    listings, total = service.find_by_filters(brand="volvo", fuel_type="diesel")
    assert total == 1
    assert listings[0].model == "V70"


def test_free_text_matches_every_term(service, catalog):
    listings, _ = service.find_by_filters(query="long range")
    assert [listing.brand for listing in listings] == ["Tesla"]

    listings, _ = service.find_by_filters(query="family volvo")
    assert [listing.model for listing in listings] == ["V70"]


def test_free_text_wildcards_are_literal(service, catalog):
    assert service.find_by_filters(query="%")[1] == 0
    assert service.find_by_filters(query="v_0")[1] == 0
    assert service.find_by_filters(query="v70")[1] == 1


def test_pagination(service, catalog):
    listings, total = service.find_by_filters(limit=2, offset=2)
    assert total == 3
    assert len(listings) == 1


def test_facets(service, catalog):
    assert service.list_categories() == ["Estate", "SUV", "Sedan"]
    assert set(service.list_models("Volvo")) == {"V70", "XC60"}
    assert service.list_fuel_types() == ["Diesel", "Electric", "Petrol"]


# ---- featured ----

def test_featured_ends_at_featured_until(make_account, make_listing):
    until = datetime(2030, 1, 1, 12, 0, 0)
    listing = make_listing(make_account("seller"), is_featured=True, featured_until=until)

    assert listing.is_featured_active(until - timedelta(seconds=1))
    assert not listing.is_featured_active(until)
    assert not listing.is_featured_active(until + timedelta(seconds=1))


def test_featured_only_search_uses_same_boundary(service, make_account, make_listing):
    until = datetime(2030, 1, 1, 12, 0, 0)
    make_listing(make_account("seller"), is_featured=True, featured_until=until)

    assert service.find_by_filters(featured_only=True, now=until - timedelta(minutes=1))[1] == 1
    assert service.find_by_filters(featured_only=True, now=until)[1] == 0


def test_highlight_requires_a_subscription(service, make_account, make_listing):
    seller = make_account("seller")
    listing = make_listing(seller)

    with pytest.raises(NotAuthorizedError) as exc:
        service.highlight_listing(listing.id, seller, days=7)
    assert exc.value.error_code == "SUBSCRIPTION_REQUIRED"


def test_highlight_respects_plan_limit(
    service, make_account, make_dealer, make_listing, make_plan, make_user_subscription
):
    owner = make_account("dealer", roles=(Role.USER, Role.DEALER))
    make_dealer(owner)
    make_user_subscription(owner, make_plan(max_featured_cars=1))
    first = make_listing(owner, seller_type=SellerType.DEALER)
    second = make_listing(owner, seller_type=SellerType.DEALER)

    now = datetime(2030, 1, 1)
    featured = service.highlight_listing(first.id, owner, days=7, now=now)
    assert featured.featured_until == now + timedelta(days=7)

    with pytest.raises(ConflictError) as exc:
        service.highlight_listing(second.id, owner, days=7, now=now)
    assert exc.value.error_code == "FEATURED_LIMIT_REACHED"

    # Once the first highlight has lapsed the slot is free again.
    assert service.highlight_listing(second.id, owner, days=7, now=now + timedelta(days=8)).is_featured


def test_remove_highlight(service, make_account, make_listing):
    admin = make_account("admin", roles=(Role.ADMIN,))
    listing = make_listing(make_account("seller"))

    service.highlight_listing(listing.id, admin, days=3)
    cleared = service.remove_highlight(listing.id, admin)
    assert not cleared.is_featured
    assert cleared.featured_until is None


# ---- deletion ----

def test_delete_listing_removes_its_requests_and_cart_entries(db, service, email, make_account, make_listing):
    seller = make_account("seller", roles=(Role.USER, Role.PRIVATE))
    buyer = make_account("buyer")
    listing = make_listing(seller)

    MessageService(db, email).create_private_message(buyer, listing.id, "Still for sale?")
    CartService(db, email).add_to_cart(buyer, listing.id)

    service.delete_listing(listing.id, seller)

    assert db.query(Listing).count() == 0
    assert db.query(QuoteRequest).count() == 0
    assert db.query(CartItem).count() == 0


def test_images(service, make_account, make_listing):
    seller = make_account("seller")
    listing = make_listing(seller)

    image = service.add_listing_image(listing.id, seller, "https://cdn.example.com/1.jpg", "image/jpeg")
    assert [i.url for i in service.get_listing(listing.id).images] == ["https://cdn.example.com/1.jpg"]

    with pytest.raises(NotAuthorizedError):
        service.delete_listing_image(image.id, make_account("other"))

    service.delete_listing_image(image.id, seller)
    assert service.get_listing(listing.id).images == []
