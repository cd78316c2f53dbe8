import pytest

DESCRIPTION = (
    "Designed for first-time DSLR owners who want impressive results straight out of the box, "
    "capture those magic moments no matter your level with the EOS 1500D."
)


def _product(**overrides):
    body = {
        "title": "Canon EOS 1500D DSLR Camera with 18-55mm Lens",
        "description": DESCRIPTION,
        "price": 879.99,
        "image": "https://i.imgur.com/QlRphfQ.jpg",
    }
    body.update(overrides)
    return body


def _headers_for(client, email="jane.doe@example.com"):
    tokens = client.post("/api/sessions", json={"email": email, "password": "Password123"}).json()
    return {"Authorization": f"Bearer {tokens['accessToken']}"}


@pytest.fixture
def jane_headers(client, jane):
    return _headers_for(client)


@pytest.fixture
def created(client, jane_headers):
    r = client.post("/api/products", json=_product(), headers=jane_headers)
    assert r.status_code == 200
    return r.json()


def test_create_product(created, jane):
    assert created["productId"].startswith("product_")
    assert len(created["productId"]) == len("product_") + 10
    assert created["user"] == jane.id
    assert created["price"] == 879.99
    assert created["title"] == _product()["title"]


def test_create_product_requires_user(client):
    assert client.post("/api/products", json=_product()).status_code == 403


def test_create_product_short_description_is_400(client, jane_headers):
    r = client.post("/api/products", json=_product(description="too short"), headers=jane_headers)
    assert r.status_code == 400


def test_get_product_is_public(client, created):
    r = client.get(f"/api/products/{created['productId']}")
    assert r.status_code == 200
    assert r.json()["productId"] == created["productId"]


def test_get_unknown_product_is_404(client):
    assert client.get("/api/products/product_missing").status_code == 404


def test_update_product(client, jane_headers, created):
    r = client.put(
        f"/api/products/{created['productId']}",
        json=_product(price=699.5, title="Canon EOS 2000D"),
        headers=jane_headers,
    )
    assert r.status_code == 200
    assert r.json()["price"] == 699.5
    assert r.json()["title"] == "Canon EOS 2000D"
    assert client.get(f"/api/products/{created['productId']}").json()["price"] == 699.5


def test_update_unknown_product_is_404(client, jane_headers):
    r = client.put("/api/products/product_missing", json=_product(), headers=jane_headers)
    assert r.status_code == 404


def test_other_user_cannot_modify_product(client, user_store, created):
    user_store.create(email="mallory@example.com", name="Mallory", password="Password123")
    mallory = _headers_for(client, "mallory@example.com")

    assert client.put(f"/api/products/{created['productId']}", json=_product(price=1), headers=mallory).status_code == 403
    assert client.delete(f"/api/products/{created['productId']}", headers=mallory).status_code == 403
    assert client.get(f"/api/products/{created['productId']}").json()["price"] == 879.99


def test_delete_product(client, jane_headers, created):
    r = client.delete(f"/api/products/{created['productId']}", headers=jane_headers)
    assert r.status_code == 200
    assert client.get(f"/api/products/{created['productId']}").status_code == 404
    assert client.delete(f"/api/products/{created['productId']}", headers=jane_headers).status_code == 404


def test_delete_requires_user(client, created):
    assert client.delete(f"/api/products/{created['productId']}").status_code == 403
