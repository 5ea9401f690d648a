# tests/test_purchase.py
import pytest
from sqlmodel import Session, select

from teashop.core.errors import InsufficientStockError
from teashop.models.order import Order
from teashop.models.product import Product
from teashop.repositories.order_repo import OrderRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.schemas.order import PurchaseRequest
from teashop.services.order_service import OrderService


def _purchase(client, product_id, quantity=1, headers=None, customization=None):
    body = {"productId": product_id, "quantity": quantity}
    if customization is not None:
        body["customization"] = customization
    return client.post("/api/products/purchase", json=body, headers=headers or {})


def test_purchase_takes_stock_and_records_order(client, session, milk_tea, customer, customer_headers):
    response = _purchase(
        client,
        milk_tea.id,
        quantity=2,
        headers=customer_headers,
        customization={"sweetness": "5", "iceLevel": "less"},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["productId"] == milk_tea.id
    assert data["quantity"] == 2
    assert data["totalPrice"] == 24.0
    assert data["remainingStock"] == 3
    assert data["customization"] == {"sweetness": "5", "iceLevel": "less"}

    session.refresh(milk_tea)
    assert milk_tea.stock == data["remainingStock"]

    order = session.exec(select(Order)).one()
    assert order.id == data["orderId"]
    assert order.customer_email == "alice@example.com"
    assert order.product_name == "Milk Tea"
    assert order.price == 12.0
    assert order.status == "pending"
    assert order.is_read is False


def test_purchase_uses_discount_price(client, session, milk_tea):
    milk_tea.discount_price = 10.0
    session.add(milk_tea)
    session.commit()

    data = _purchase(client, milk_tea.id, quantity=3).json()["data"]
    assert data["totalPrice"] == 30.0


def test_numeric_sweetness_is_accepted(client, milk_tea):
    response = _purchase(client, milk_tea.id, customization={"sweetness": 7})
    assert response.status_code == 200
    assert response.json()["data"]["customization"]["sweetness"] == "7"


def test_anonymous_purchase_is_attributed_to_guest(client, session, milk_tea, guest):
    response = _purchase(client, milk_tea.id)
    assert response.status_code == 200

    order = session.exec(select(Order)).one()
    assert order.customer_email == "guest@shop.com"

    # Background refresh of the guest's cached stats
    session.refresh(guest)
    assert guest.total_orders == 1
    assert guest.total_spent == 12.0


def test_purchase_refreshes_buyer_stats(client, session, milk_tea, customer, customer_headers):
    _purchase(client, milk_tea.id, quantity=2, headers=customer_headers)
    _purchase(client, milk_tea.id, quantity=1, headers=customer_headers)

    session.refresh(customer)
    assert customer.total_orders == 2
    assert customer.total_spent == 36.0
    assert customer.stats_updated_at is not None


def test_insufficient_stock_is_rejected(client, session, milk_tea):
    response = _purchase(client, milk_tea.id, quantity=6)

    assert response.status_code == 409
    assert response.json()["success"] is False

    session.refresh(milk_tea)
    assert milk_tea.stock == 5
    assert session.exec(select(Order)).all() == []


def test_stock_never_goes_negative(client, session, milk_tea):
    results = [_purchase(client, milk_tea.id, quantity=2).status_code for _ in range(4)]

    assert results == [200, 200, 409, 409]
    session.refresh(milk_tea)
    assert milk_tea.stock == 1
    assert len(session.exec(select(Order)).all()) == 2


def test_stale_read_cannot_oversell(engine, milk_tea):
    """
    Two shoppers load the product (stock 5) before either buys 3.
    The second purchase must fail even though its copy still shows 5.
    """
    service = OrderService(OrderRepository(), ProductRepository())
    payload = PurchaseRequest(productId=milk_tea.id, quantity=3)

    with Session(engine) as first, Session(engine) as second:
        assert first.get(Product, milk_tea.id).stock == 5
        assert second.get(Product, milk_tea.id).stock == 5

        result = service.purchase(first, payload, None)
        assert result.remaining_stock == 2

        with pytest.raises(InsufficientStockError):
            service.purchase(second, payload, None)

    with Session(engine) as check:
        assert check.get(Product, milk_tea.id).stock == 2
        assert len(check.exec(select(Order)).all()) == 1


def test_unsupported_option_is_stripped(client, session, drinks):
    lemonade = Product(
        name="Lemonade", price=8.0, category=drinks.name, stock=10,
        has_sweetness=True, has_ice_level=False,
    )
    session.add(lemonade)
    session.commit()
    session.refresh(lemonade)

    # The storefront sends both keys even when the ice section is hidden
    response = _purchase(
        client, lemonade.id, customization={"sweetness": "3", "iceLevel": "normal"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["customization"] == {"sweetness": "3", "iceLevel": None}

    order = session.exec(select(Order)).one()
    assert order.customization == '{"sweetness": "3", "iceLevel": null}'

    session.refresh(lemonade)
    assert lemonade.stock == 9


def test_customization_dropped_for_plain_product(client, session, drinks):
    cookie = Product(name="Cookie", price=3.0, category=drinks.name, stock=10)
    session.add(cookie)
    session.commit()
    session.refresh(cookie)

    response = _purchase(
        client, cookie.id, customization={"sweetness": "3", "iceLevel": "normal"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["customization"] is None
    assert session.exec(select(Order)).one().customization is None


def test_empty_customization_is_dropped(client, session, drinks):
    cookie = Product(name="Cookie", price=3.0, category=drinks.name, stock=10)
    session.add(cookie)
    session.commit()
    session.refresh(cookie)

    response = _purchase(client, cookie.id, customization={})
    assert response.status_code == 200
    assert response.json()["data"]["customization"] is None


@pytest.mark.parametrize(
    "body",
    [
        {"productId": 1, "quantity": 0},
        {"productId": 1, "quantity": -1},
        {"quantity": 1},
        {"productId": 1, "customization": {"sweetness": "4"}},
        {"productId": 1, "customization": {"iceLevel": "extra"}},
    ],
)
def test_invalid_purchase_payload(client, milk_tea, body):
    response = client.post("/api/products/purchase", json=body)
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert response.json()["errors"]


def test_missing_product(client):
    response = _purchase(client, 999)
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Product not found"}


def test_disabled_account_cannot_purchase(client, session, milk_tea, customer, customer_headers):
    customer.status = "disabled"
    session.add(customer)
    session.commit()

    response = _purchase(client, milk_tea.id, headers=customer_headers)
    assert response.status_code == 403
