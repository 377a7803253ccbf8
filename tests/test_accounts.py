from datetime import timedelta

import pytest

from accounts.service import AccountService
from core.database.models import Account, CartItem, Dealer, Listing, QuoteRequest, SellerType
from core.exceptions import AuthenticationError, ConflictError, InvalidRequestError, NotFoundError
from core.security.roles import Role
from core.utils.data_helpers import utcnow
from messages.service import MessageService


def registration(username, email=None, password="password123"):
    return {
        "username": username,
        "email": email or f"{username}@example.com",
        "password": password,
        "confirm_password": password,
    }


@pytest.fixture
def service(db, email):
    return AccountService(db, email)


# ---- registration and login ----

def test_register_creates_user_and_sends_welcome(service, email):
    account = service.register(registration("kari"))

    assert account.role_names == ["USER"]
    assert account.password_hash != "password123"
    assert email.subjects_for("kari@example.com") == ["Welcome to FCF Motors"]


def test_register_rejects_mismatched_passwords(service):
    data = registration("kari")
    data["confirm_password"] = "something-else"

    with pytest.raises(InvalidRequestError) as exc:
        service.register(data)
    assert exc.value.error_code == "PASSWORD_MISMATCH"


def test_register_rejects_taken_username_and_email(service):
    service.register(registration("kari"))

    with pytest.raises(InvalidRequestError) as exc:
        service.register(registration("kari", email="other@example.com"))
    assert exc.value.error_code == "USERNAME_TAKEN"

    with pytest.raises(InvalidRequestError) as exc:
        service.register(registration("ola", email="KARI@example.com"))
    assert exc.value.error_code == "EMAIL_TAKEN"


def test_authenticate_by_username_or_email(service):
    account = service.register(registration("kari"))

    assert service.authenticate("kari", "password123").id == account.id
    assert service.authenticate("kari@example.com", "password123").id == account.id
    with pytest.raises(AuthenticationError):
        service.authenticate("kari", "wrong-password")


def test_ensure_admin_is_idempotent(db, service):
    first = service.ensure_admin("root", "root@example.com", "password123")
    second = service.ensure_admin("root", "root@example.com", "password123")

    assert first.id == second.id
    assert first.role_names == ["ADMIN", "USER"]
    assert db.query(Account).count() == 1


# ---- password reset ----

def test_password_reset_flow(service, email):
    service.register(registration("kari"))

    token = service.generate_reset_token("kari@example.com")
    assert service.is_reset_token_valid(token)
    assert "Reset your FCF Motors password" in email.subjects_for("kari@example.com")

    service.reset_password(token, "a-new-password", "a-new-password")

    assert not service.is_reset_token_valid(token)
    assert service.authenticate("kari", "a-new-password")


def test_expired_reset_token_is_invalid(db, service):
    account = service.register(registration("kari"))
    token = service.generate_reset_token(account.email)
    account.reset_token_expiry = utcnow() - timedelta(minutes=1)
    db.commit()

    assert not service.is_reset_token_valid(token)
    with pytest.raises(InvalidRequestError):
        service.reset_password(token, "a-new-password", "a-new-password")


def test_reset_for_unknown_email(service):
    with pytest.raises(NotFoundError):
        service.generate_reset_token("nobody@example.com")


# ---- profile ----

def test_update_profile_keeps_blank_fields(service, make_account):
    account = make_account("kari")
    service.update_profile(account, {"first_name": "Kari", "phone_number": "555"})

    updated = service.update_profile(account, {"first_name": "", "last_name": "Nordmann", "email": " "})

    assert updated.email == "kari@example.com"
    assert updated.account_information.first_name == "Kari"
    assert updated.account_information.last_name == "Nordmann"
    assert updated.account_information.phone_number == "555"


def test_update_profile_email_must_be_unique(service, make_account):
    make_account("ola")
    with pytest.raises(ConflictError):
        service.update_profile(make_account("kari"), {"email": "ola@example.com"})


# ---- private seller role ----

def test_become_and_stop_being_private(db, service, make_account, make_listing):
    account = make_account("kari")

    service.become_private(account)
    assert account.has_role(Role.PRIVATE)
    with pytest.raises(InvalidRequestError):
        service.become_private(account)

    make_listing(account)
    assert service.remove_private(account) == 1
    assert account.role_set == {Role.USER}
    assert db.query(Listing).count() == 0


def test_dealers_cannot_become_private(service, make_account):
    with pytest.raises(InvalidRequestError) as exc:
        service.become_private(make_account("dealer", roles=(Role.USER, Role.DEALER)))
    assert exc.value.error_code == "HAS_SUBSCRIPTION"


# ---- deletion ----

def test_delete_account_requires_password(service, make_account):
    with pytest.raises(InvalidRequestError) as exc:
        service.delete_account(make_account("kari"), "wrong-password")
    assert exc.value.error_code == "INCORRECT_PASSWORD"


def test_delete_account_with_subscription_is_refused(service, make_account, make_plan, make_user_subscription):
    account = make_account("kari")
    make_user_subscription(account, make_plan())

    with pytest.raises(InvalidRequestError) as exc:
        service.delete_account(account, "password123")
    assert exc.value.error_code == "ACTIVE_SUBSCRIPTIONS"


def test_delete_account_removes_everything_it_owns(db, service, email, make_account, make_listing):
    seller = make_account("seller", roles=(Role.USER, Role.PRIVATE))
    leaving = make_account("leaving", roles=(Role.USER, Role.PRIVATE))
    own_listing = make_listing(leaving)
    other_listing = make_listing(seller)

    messages = MessageService(db, email)
    messages.create_private_message(leaving, other_listing.id, "Interested")
    messages.create_private_message(seller, own_listing.id, "Swap?")
    db.add(CartItem(account_id=leaving.id, listing_id=other_listing.id, quantity=1))
    db.commit()

    service.delete_account(leaving, "password123")

    assert db.query(Account).filter(Account.username == "leaving").first() is None
    assert [l.id for l in db.query(Listing).all()] == [other_listing.id]
    assert db.query(QuoteRequest).count() == 0
    assert db.query(CartItem).count() == 0
    assert "Your FCF Motors account was deleted" in email.subjects_for("leaving@example.com")


def test_delete_dealer_account_removes_dealer(db, service, make_account, make_dealer, make_listing):
    owner = make_account("dealer", roles=(Role.USER, Role.DEALER))
    make_dealer(owner)
    make_listing(owner, seller_type=SellerType.DEALER)

    service.delete_account(owner, "password123")

    assert db.query(Dealer).count() == 0
    assert db.query(Listing).count() == 0
