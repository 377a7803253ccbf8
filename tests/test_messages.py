import pytest

from core.database.models import RequestStatus, RequestType, SellerType
from core.exceptions import ConflictError, InvalidRequestError, NotAuthorizedError
from core.security.roles import Role
from messages.service import MessageService


@pytest.fixture
def service(db, email):
    return MessageService(db, email)


@pytest.fixture
def private_listing(make_account, make_listing):
    seller = make_account("seller", roles=(Role.USER, Role.PRIVATE))
    return make_listing(seller, brand="Volvo", model="V70", year=2009)


@pytest.fixture
def dealer_listing(make_account, make_dealer, make_listing):
    owner = make_account("dealer", roles=(Role.USER, Role.DEALER))
    make_dealer(owner, email="sales@example.com")
    return make_listing(owner, seller_type=SellerType.DEALER, brand="VW", model="Golf")


# ---- private messages ----

def test_private_message_exchange(service, email, make_account, private_listing):
    buyer = make_account("buyer")
    seller = private_listing.seller

    request = service.create_private_message(buyer, private_listing.id, "Is it still available?")
    assert request.status == RequestStatus.PENDING
    assert request.request_type == RequestType.PRIVATE
    assert request.recipient_email == seller.email
    assert email.subjects_for(seller.email) == ["New message about 2009 Volvo V70"]

    answered = service.respond_to_private_message(request.id, seller, "Yes, come by on Saturday")
    assert answered.status == RequestStatus.RESPONDED
    assert answered.response_message == "Yes, come by on Saturday"
    assert answered.responded_at is not None
    assert email.subjects_for(buyer.email) == ["Reply about 2009 Volvo V70"]

    assert [m.id for m in service.get_messages_for_user(buyer)] == [request.id]
    assert [m.id for m in service.get_messages_for_user(seller)] == [request.id]


def test_request_is_answered_only_once(service, make_account, private_listing):
    buyer = make_account("buyer")
    request = service.create_private_message(buyer, private_listing.id, "Hello")
    service.respond_to_private_message(request.id, private_listing.seller, "Hi")

    with pytest.raises(InvalidRequestError) as exc:
        service.respond_to_private_message(request.id, buyer, "Hi again")
    assert exc.value.error_code == "ALREADY_RESPONDED"
    assert service.get_request(request.id).response_message == "Hi"


def test_private_message_needs_private_listing(service, make_account, dealer_listing):
    with pytest.raises(InvalidRequestError) as exc:
        service.create_private_message(make_account("buyer"), dealer_listing.id, "Hello")
    assert exc.value.error_code == "NOT_PRIVATE_LISTING"


def test_empty_message_is_rejected(service, make_account, private_listing):
    with pytest.raises(InvalidRequestError):
        service.create_private_message(make_account("buyer"), private_listing.id, "   ")


def test_outsider_cannot_answer(service, make_account, private_listing):
    request = service.create_private_message(make_account("buyer"), private_listing.id, "Hello")

    with pytest.raises(NotAuthorizedError):
        service.respond_to_private_message(request.id, make_account("outsider"), "Hi")


# ---- dealer quotes ----

def test_anonymous_quote_needs_email(service, dealer_listing):
    with pytest.raises(InvalidRequestError):
        service.request_quote(None, dealer_listing.id)


def test_quote_flow(service, email, make_account, dealer_listing):
    buyer = make_account("buyer")

    quote = service.request_quote(buyer, dealer_listing.id, message="Best price?")
    assert quote.request_type == RequestType.DEALER_QUOTE
    assert quote.dealer_id is not None
    assert quote.recipient_email == "sales@example.com"
    assert email.subjects_for("sales@example.com") == ["Quote request for VW Golf"]

    with pytest.raises(ConflictError) as exc:
        service.request_quote(buyer, dealer_listing.id)
    assert exc.value.error_code == "DUPLICATE_REQUEST"

    with pytest.raises(NotAuthorizedError):
        service.respond_to_quote(quote.id, buyer, "I accept my own offer")

    answered = service.respond_to_quote(quote.id, dealer_listing.seller, "19 900")
    assert answered.status == RequestStatus.RESPONDED
    assert email.subjects_for(buyer.email) == ["Your quote for VW Golf"]

    # A new request is allowed once the previous one has been answered.
    assert service.request_quote(buyer, dealer_listing.id).id != quote.id
    assert len(service.get_quotes_for_user(buyer)) == 2


def test_quote_needs_dealer_listing(service, private_listing):
    with pytest.raises(InvalidRequestError) as exc:
        service.request_quote(None, private_listing.id, email="visitor@example.com")
    assert exc.value.error_code == "NOT_DEALER_LISTING"


def test_dealer_sees_its_requests(service, make_account, dealer_listing):
    service.request_quote(None, dealer_listing.id, email="visitor@example.com")
    dealer = dealer_listing.seller.dealer

    assert len(service.list_dealer_requests(dealer.id, dealer_listing.seller)) == 1
    with pytest.raises(NotAuthorizedError):
        service.list_dealer_requests(dealer.id, make_account("nosy"))


# ---- http ----

def test_anonymous_quote_over_http(client, dealer_listing):
    response = client.post("/api/quotes", json={"listing_id": dealer_listing.id, "email": "visitor@example.com"})

    assert response.status_code == 200
    quote = response.json()["data"]["quote"]
    assert quote["status"] == "PENDING"
    assert quote["account_id"] is None


def test_messages_over_http(client, make_account, private_listing, auth_headers):
    buyer = make_account("buyer")

    sent = client.post(
        "/api/messages",
        json={"listing_id": private_listing.id, "message": "Still for sale?"},
        headers=auth_headers(buyer)
    )
    assert sent.status_code == 200
    message_id = sent.json()["data"]["message"]["id"]

    reply = client.post(
        f"/api/messages/{message_id}/respond",
        json={"response": "Yes"},
        headers=auth_headers(private_listing.seller)
    )
    assert reply.json()["data"]["message"]["status"] == "RESPONDED"

    again = client.post(
        f"/api/messages/{message_id}/respond",
        json={"response": "Still yes"},
        headers=auth_headers(private_listing.seller)
    )
    assert again.status_code == 422
    assert again.json()["error_code"] == "ALREADY_RESPONDED"
