"""Shared fixtures: an app on in-memory SQLite with a stubbed payment gateway."""
import json

import httpx
import pytest

from main import create_app
from services.auth_service.models import ROLE_ADMIN, ROLE_USER, User
from services.auth_service.repository import UserRepository
from services.auth_service.service import AuthService
from services.catalog_service.models import CatalogItem
from services.catalog_service.repository import CatalogRepository
from services.order_service.pricing import calculate_pricing
from services.payment_service.gateway import RazorpayGateway
from shared.config.database import create_tables
from shared.config.settings import Settings
from shared.security import create_access_token

RAZORPAY_SECRET = "rzp_test_secret"
GATEWAY_ORDER_ID = "order_Test123"

DELHI_ADDRESS = {
    "address_line1": "12 Janpath",
    "city": "New Delhi",
    "state": "Delhi",
    "pincode": "110001",
}
LADAKH_ADDRESS = {
    "address_line1": "Main Bazaar",
    "city": "Leh",
    "state": "Ladakh",
    "pincode": "194101",
}
GUEST = {"name": "Guest Buyer", "email": "guest@example.com", "phone": "9876543210"}


@pytest.fixture
def settings():
    return Settings(
        jwt_secret_key="test-jwt-secret",
        database_url="sqlite+aiosqlite://",
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret=RAZORPAY_SECRET,
        tracing_enabled=False,
        metrics_enabled=False,
        rate_limit_enabled=False,
    )


@pytest.fixture
def gateway_requests():
    """Every request the stub gateway received, in order."""
    return []


@pytest.fixture
def gateway(settings, gateway_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        gateway_requests.append(request)
        if request.method == "POST" and request.url.path.endswith("/orders"):
            body = json.loads(request.content)
            return httpx.Response(200, json={
                "id": GATEWAY_ORDER_ID,
                "entity": "order",
                "amount": body["amount"],
                "amount_paid": 0,
                "amount_due": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            })
        if request.method == "GET" and "/payments/" in request.url.path:
            payment_id = request.url.path.rsplit("/", 1)[-1]
            if payment_id == "pay_missing":
                return httpx.Response(404, json={"error": {"code": "BAD_REQUEST_ERROR"}})
            return httpx.Response(200, json={"id": payment_id, "status": "captured", "amount": 28600})
        return httpx.Response(404)

    return RazorpayGateway.from_settings(settings, transport=httpx.MockTransport(handler))


@pytest.fixture
async def app(settings, gateway):
    app = create_app(settings, payment_gateway=gateway)
    await create_tables(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def db(app):
    async with app.state.sessionmaker() as session:
        yield session


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_item(db):
    async def _make(title="Starry Night", price=200.0, stock=5, **fields):
        item = CatalogItem(
            title=title,
            price=price,
            stock=stock,
            category=fields.pop("category", "Art"),
            tags=fields.pop("tags", []),
            **fields,
        )
        return await CatalogRepository.create(db, item)
    return _make


@pytest.fixture
def make_user(db):
    async def _make(email="asha@example.com", name="Asha Rao", role=ROLE_USER, password="correct-horse"):
        user = User(
            email=email,
            name=name,
            role=role,
            hashed_password=AuthService.hash_password(password),
        )
        return await UserRepository.create(db, user)
    return _make


@pytest.fixture
async def customer(make_user):
    return await make_user()


@pytest.fixture
async def admin(make_user):
    return await make_user(email="admin@example.com", name="Shop Admin", role=ROLE_ADMIN)


def auth_headers(settings, user):
    token = create_access_token(settings, {"sub": str(user.id), "email": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer_headers(settings, customer):
    return auth_headers(settings, customer)


@pytest.fixture
def admin_headers(settings, admin):
    return auth_headers(settings, admin)


async def stock_of(app, item_id):
    """Reads stock through a fresh session so nothing cached gets in the way."""
    async with app.state.sessionmaker() as session:
        item = await CatalogRepository.find_by_id(session, item_id)
        return item.stock


def order_payload(item, quantity=1, payment_method="COD", address=None, customer=GUEST, **extra):
    address = dict(address or DELHI_ADDRESS)
    pricing = calculate_pricing(item.price * quantity, address["state"])
    payload = {
        "items": [{"item_id": item.id, "quantity": quantity, "price": item.price}],
        "shipping_address": address,
        "payment_details": {"method": payment_method, "amount": pricing.total, "currency": "INR"},
    }
    if customer is not None:
        payload["customer"] = dict(customer)
    payload.update(extra)
    return payload
