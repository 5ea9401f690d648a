# tests/test_products.py
from datetime import timedelta

import pytest

from teashop.core.clock import utcnow
from teashop.models.product import Product
from teashop.repositories.category_repo import CategoryRepository
from teashop.repositories.product_repo import ProductRepository
from teashop.repositories.user_repo import UserRepository
from teashop.services.product_service import discount_percentage


def _new_product(**overrides):
    body = {
        "name": "Lemon Tea",
        "description": "Fresh lemon",
        "price": 10.0,
        "imageUrl": "🍋",
        "category": "Tea",
        "stock": 20,
        "hasSweetness": True,
        "hasIceLevel": True,
    }
    body.update(overrides)
    return body


@pytest.mark.parametrize(
    "price, discount, expected",
    [
        (10.0, None, None),
        (10.0, 8.0, 20),
        (12.0, 9.0, 25),
        (9.9, 6.6, 33),
        (10.0, 10.0, None),
    ],
)
def test_discount_percentage(price, discount, expected):
    assert discount_percentage(price, discount) == expected


def test_public_listing(client, milk_tea):
    response = client.get("/api/products")

    assert response.status_code == 200
    products = response.json()["products"]
    assert len(products) == 1
    assert products[0]["name"] == "Milk Tea"
    assert products[0]["has_sweetness"] is True


def test_listing_puts_hot_items_first(client, session, drinks):
    now = utcnow()
    session.add(Product(name="Old hot", price=5, category="Tea", is_hot=True,
                        hot_priority=5, created_at=now - timedelta(days=2)))
    session.add(Product(name="New plain", price=5, category="Tea", created_at=now))
    session.add(Product(name="Hotter", price=5, category="Tea", is_hot=True,
                        hot_priority=9, created_at=now - timedelta(days=3)))
    session.add(Product(name="Old plain", price=5, category="Snacks",
                        created_at=now - timedelta(days=1)))
    session.commit()

    names = [p["name"] for p in client.get("/api/products").json()["products"]]
    assert names == ["Hotter", "Old hot", "New plain", "Old plain"]

    hot = client.get("/api/products", params={"hot_only": "true"}).json()["products"]
    assert [p["name"] for p in hot] == ["Hotter", "Old hot"]

    snacks = client.get("/api/products", params={"category": "Snacks"}).json()["products"]
    assert [p["name"] for p in snacks] == ["Old plain"]


def test_get_product(client, milk_tea):
    response = client.get(f"/api/products/{milk_tea.id}")
    assert response.status_code == 200
    assert response.json()["product"]["stock"] == 5

    missing = client.get("/api/products/999")
    assert missing.status_code == 404


def test_create_product(client, manager_headers, drinks):
    response = client.post(
        "/api/products",
        headers=manager_headers,
        json=_new_product(discountPrice=8.0, isHot=True),
    )

    assert response.status_code == 200
    product = response.json()["product"]
    assert product["id"] > 0
    assert product["discount_price"] == 8.0
    assert product["discount_percentage"] == 20
    assert product["hot_badge_text"] == "🔥 Hot"
    assert product["image_url"] == "🍋"


def test_create_product_requires_manager(client, customer_headers, drinks):
    anonymous = client.post("/api/products", json=_new_product())
    assert anonymous.status_code == 401

    customer = client.post("/api/products", headers=customer_headers, json=_new_product())
    assert customer.status_code == 403
    assert customer.json() == {"success": False, "message": "Manager access required"}


def test_create_product_unknown_category(client, manager_headers, drinks):
    response = client.post(
        "/api/products",
        headers=manager_headers,
        json=_new_product(category="Potions"),
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Unknown category: Potions"


@pytest.mark.parametrize(
    "overrides",
    [
        {"price": 0},
        {"price": -3},
        {"stock": -1},
        {"discountPrice": 12.0},
        {"name": "   "},
        {"role": "manager"},
    ],
)
def test_create_product_validation(client, manager_headers, drinks, overrides):
    response = client.post(
        "/api/products",
        headers=manager_headers,
        json=_new_product(**overrides),
    )
    assert response.status_code == 400


def test_partial_update(client, session, manager_headers, milk_tea):
    response = client.put(
        f"/api/products/{milk_tea.id}",
        headers=manager_headers,
        json={"stock": 40, "discountPrice": 9.0},
    )

    assert response.status_code == 200
    product = response.json()["product"]
    assert product["stock"] == 40
    assert product["discount_percentage"] == 25
    assert product["name"] == "Milk Tea"
    assert product["description"] == "Black tea with milk"

    cleared = client.put(
        f"/api/products/{milk_tea.id}",
        headers=manager_headers,
        json={"discountPrice": None},
    ).json()["product"]
    assert cleared["discount_price"] is None
    assert cleared["discount_percentage"] is None


def test_update_rejects_discount_above_new_price(client, manager_headers, milk_tea):
    client.put(f"/api/products/{milk_tea.id}", headers=manager_headers,
               json={"discountPrice": 9.0})
    response = client.put(
        f"/api/products/{milk_tea.id}",
        headers=manager_headers,
        json={"price": 8.0},
    )
    assert response.status_code == 400


def test_update_unknown_category(client, manager_headers, milk_tea):
    response = client.put(
        f"/api/products/{milk_tea.id}",
        headers=manager_headers,
        json={"category": "Potions"},
    )
    assert response.status_code == 400


def test_delete_product(client, session, manager_headers, milk_tea):
    product_id = milk_tea.id
    response = client.delete(f"/api/products/{product_id}", headers=manager_headers)
    assert response.status_code == 200

    assert client.get(f"/api/products/{product_id}").status_code == 404
    assert client.delete(f"/api/products/{product_id}", headers=manager_headers).status_code == 404


def test_repository_listings(session, milk_tea, customer):
    repo = ProductRepository()
    assert [p.id for p in repo.list_products(session, category="Tea")] == [milk_tea.id]
    assert repo.list_products(session, hot_only=True) == []
    assert repo.list_category_names(session) == ["Tea"]

    assert [c.name for c in CategoryRepository().list_all(session)] == ["Tea"]
    assert [u.email for u in UserRepository().list_all(session)] == ["alice@example.com"]
