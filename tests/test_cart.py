"""Tests for the cart and the checkout summary."""

import uuid
from unittest.mock import MagicMock, Mock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from goodie.models.cart import CartItem
from goodie.models.product import Product
from goodie.repositories.cart_repo import CartRepository
from goodie.repositories.product_repo import ProductRepository
from goodie.schemas.cart import CartItemCreate
from goodie.services.cart_service import CartService

API = "/api/v1"


@pytest.fixture
def headers(standard_user, auth_headers):
    return auth_headers(standard_user)


def add(client, headers, product_id, quantity=1):
    return client.post(
        f"{API}/cart",
        json={"product_id": str(product_id), "quantity": quantity},
        headers=headers,
    )


class TestCartEndpoints:
    def test_cart_requires_a_session(self, client):
        assert client.get(f"{API}/cart/items").status_code == 401

    def test_empty_cart(self, client, headers):
        response = client.get(f"{API}/cart/items", headers=headers)

        assert response.status_code == 200
        assert response.json() == []

    def test_add_and_list(self, client, headers, create_product):
        product = create_product(price=4.0)

        added = add(client, headers, product.id, 3)

        assert added.status_code == 200
        assert added.json()["quantity"] == 3

        items = client.get(f"{API}/cart/items", headers=headers).json()
        assert len(items) == 1
        assert items[0]["product"]["name"] == "Lemon Tart"
        assert items[0]["line_total"] == 12.0

    def test_adding_again_increases_quantity(self, client, headers, create_product):
        product = create_product()

        add(client, headers, product.id, 1)
        response = add(client, headers, product.id, 2)

        assert response.json()["quantity"] == 3
        assert len(client.get(f"{API}/cart/items", headers=headers).json()) == 1

    def test_items_are_listed_in_the_order_added(self, client, headers, create_product):
        first = create_product(name="First")
        second = create_product(name="Second")

        add(client, headers, first.id)
        add(client, headers, second.id)

        items = client.get(f"{API}/cart/items", headers=headers).json()
        assert [it["product"]["name"] for it in items] == ["First", "Second"]

    def test_carts_are_per_user(self, client, headers, create_product, create_user, auth_headers):
        product = create_product()
        add(client, headers, product.id)
        other = create_user(email="other@example.com")

        items = client.get(f"{API}/cart/items", headers=auth_headers(other)).json()

        assert items == []

    def test_add_unknown_product_is_404(self, client, headers):
        assert add(client, headers, uuid.uuid4()).status_code == 404

    def test_zero_quantity_is_422(self, client, headers, create_product):
        product = create_product()

        assert add(client, headers, product.id, 0).status_code == 422

    def test_update_quantity(self, client, headers, create_product):
        product = create_product()
        add(client, headers, product.id, 5)

        response = client.patch(f"{API}/cart/{product.id}", json={"quantity": 2}, headers=headers)

        assert response.status_code == 200
        assert response.json()["quantity"] == 2

    def test_update_missing_item_is_404(self, client, headers, create_product):
        product = create_product()

        response = client.patch(f"{API}/cart/{product.id}", json={"quantity": 2}, headers=headers)

        assert response.status_code == 404

    def test_remove_item(self, client, headers, create_product):
        product = create_product()
        add(client, headers, product.id)

        response = client.delete(f"{API}/cart/{product.id}", headers=headers)

        assert response.status_code == 200
        assert client.get(f"{API}/cart/items", headers=headers).json() == []
        assert client.delete(f"{API}/cart/{product.id}", headers=headers).status_code == 404

    def test_clear_cart(self, client, headers, create_product):
        add(client, headers, create_product(name="A").id)
        add(client, headers, create_product(name="B").id)

        response = client.delete(f"{API}/cart", headers=headers)

        assert response.status_code == 200
        assert client.get(f"{API}/cart/items", headers=headers).json() == []


class TestCheckout:
    def test_summary_totals(self, client, headers, create_product):
        add(client, headers, create_product(name="A", price=2.5).id, 2)
        add(client, headers, create_product(name="B", price=10.0).id, 1)

        response = client.get(f"{API}/checkout", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 2
        assert data["total_quantity"] == 3
        assert data["subtotal"] == 15.0
        assert data["shipping"] == 0
        assert data["total"] == 15.0

    def test_empty_cart_summary(self, client, headers):
        data = client.get(f"{API}/checkout", headers=headers).json()

        assert data["items"] == []
        assert data["total"] == 0

    def test_checkout_does_not_empty_the_cart(self, client, headers, create_product):
        add(client, headers, create_product().id)

        client.get(f"{API}/checkout", headers=headers)

        assert len(client.get(f"{API}/cart/items", headers=headers).json()) == 1

    def test_checkout_requires_a_session(self, client):
        assert client.get(f"{API}/checkout").status_code == 401


class TestConcurrentAdd:
    def test_losing_insert_adds_to_the_winning_row(self):
        user_id, product_id = uuid.uuid4(), uuid.uuid4()
        winner = CartItem(user_id=user_id, product_id=product_id, quantity=5)

        cart_repo = Mock(spec=CartRepository)
        cart_repo.increment_quantity.side_effect = [None, winner]
        cart_repo.create.side_effect = IntegrityError("INSERT", {}, Exception("unique"))
        product_repo = Mock(spec=ProductRepository)
        product_repo.get_by_id.return_value = Product(name="Cake", price=3.0)
        db = MagicMock()

        item = CartService(cart_repo, product_repo).add_to_cart(
            db, user_id, CartItemCreate(product_id=product_id, quantity=3)
        )

        db.rollback.assert_called_once()
        assert item is winner
        assert cart_repo.increment_quantity.call_count == 2
        cart_repo.increment_quantity.assert_called_with(db, user_id, product_id, 3)

    def test_increases_from_two_sessions_both_count(self, engine, standard_user, create_product):
        user_id, product_id = standard_user.id, create_product().id
        service = CartService(CartRepository(), ProductRepository())
        repo = CartRepository()

        with Session(engine) as first, Session(engine) as second:
            service.add_to_cart(first, user_id, CartItemCreate(product_id=product_id, quantity=1))

            # Both sessions hold the line at quantity 1 before either bumps it
            assert repo.get_item(first, user_id, product_id).quantity == 1
            assert repo.get_item(second, user_id, product_id).quantity == 1

            service.add_to_cart(first, user_id, CartItemCreate(product_id=product_id, quantity=1))
            item = service.add_to_cart(
                second, user_id, CartItemCreate(product_id=product_id, quantity=1)
            )

            assert item.quantity == 3

        with Session(engine) as fresh:
            assert repo.get_item(fresh, user_id, product_id).quantity == 3
