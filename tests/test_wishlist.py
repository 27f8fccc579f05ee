"""Tests for the wishlist."""

import uuid

import pytest

API = "/api/v1"


@pytest.fixture
def headers(standard_user, auth_headers):
    return auth_headers(standard_user)


def save(client, headers, product_id):
    return client.post(f"{API}/wishlist", json={"product_id": str(product_id)}, headers=headers)


def test_wishlist_requires_a_session(client):
    assert client.get(f"{API}/wishlist/items").status_code == 401


def test_add_and_list(client, headers, create_product):
    product = create_product()

    response = save(client, headers, product.id)

    assert response.status_code == 201
    items = client.get(f"{API}/wishlist/items", headers=headers).json()
    assert [it["product"]["id"] for it in items] == [str(product.id)]


def test_adding_twice_keeps_one_entry(client, headers, create_product):
    product = create_product()

    first = save(client, headers, product.id).json()
    second = save(client, headers, product.id)

    assert second.status_code == 201
    assert second.json()["id"] == first["id"]
    assert len(client.get(f"{API}/wishlist/items", headers=headers).json()) == 1


def test_most_recent_first(client, headers, create_product):
    save(client, headers, create_product(name="Earlier").id)
    save(client, headers, create_product(name="Later").id)

    items = client.get(f"{API}/wishlist/items", headers=headers).json()

    assert [it["product"]["name"] for it in items] == ["Later", "Earlier"]


def test_unknown_product_is_404(client, headers):
    assert save(client, headers, uuid.uuid4()).status_code == 404


def test_remove(client, headers, create_product):
    product = create_product()
    save(client, headers, product.id)

    response = client.delete(f"{API}/wishlist/{product.id}", headers=headers)

    assert response.status_code == 200
    assert client.get(f"{API}/wishlist/items", headers=headers).json() == []


def test_remove_missing_is_404(client, headers, create_product):
    product = create_product()

    response = client.delete(f"{API}/wishlist/{product.id}", headers=headers)

    assert response.status_code == 404
