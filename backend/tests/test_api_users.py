def _payload(**overrides):
    body = {
        "email": "jane.doe@example.com",
        "name": "Jane Doe",
        "password": "Password123",
        "passwordConfirmation": "Password123",
    }
    body.update(overrides)
    return body


def test_register_user(client):
    r = client.post("/api/users", json=_payload())
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "jane.doe@example.com"
    assert body["name"] == "Jane Doe"
    assert isinstance(body["id"], int)
    assert "createdAt" in body and "updatedAt" in body
    assert "password" not in body
    assert "hashed_password" not in body


def test_registered_user_can_log_in(client):
    client.post("/api/users", json=_payload())
    r = client.post("/api/sessions", json={"email": "jane.doe@example.com", "password": "Password123"})
    assert r.status_code == 200


def test_register_password_mismatch_is_400(client):
    r = client.post("/api/users", json=_payload(passwordConfirmation="Different123"))
    assert r.status_code == 400


def test_register_short_password_is_400(client):
    r = client.post("/api/users", json=_payload(password="abc", passwordConfirmation="abc"))
    assert r.status_code == 400


def test_register_invalid_email_is_400(client):
    r = client.post("/api/users", json=_payload(email="not-an-email"))
    assert r.status_code == 400


def test_register_duplicate_email_is_409(client, jane):
    r = client.post("/api/users", json=_payload(email="Jane.Doe@example.com"))
    assert r.status_code == 409


def test_register_password_longer_than_bcrypt_limit_is_400(client):
    long_password = "a" * 80
    r = client.post("/api/users", json=_payload(password=long_password, passwordConfirmation=long_password))
    assert r.status_code == 400


def test_register_password_limit_counts_bytes_not_characters(client):
    # 40 characters, 80 bytes in UTF-8
    long_password = "é" * 40
    r = client.post("/api/users", json=_payload(password=long_password, passwordConfirmation=long_password))
    assert r.status_code == 400


def test_register_password_at_bcrypt_limit(client):
    password = "a" * 72
    r = client.post("/api/users", json=_payload(password=password, passwordConfirmation=password))
    assert r.status_code == 200
    login = client.post("/api/sessions", json={"email": "jane.doe@example.com", "password": password})
    assert login.status_code == 200
