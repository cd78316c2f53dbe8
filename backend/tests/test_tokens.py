from datetime import timedelta

from jose import jwt

from product_api.core.tokens import TokenCodec, TokenFailure


def test_issue_and_verify_roundtrip(codec):
    token = codec.issue({"sub": "1", "email": "jane.doe@example.com", "typ": "access"})
    result = codec.verify(token)

    assert result.valid is True
    assert result.expired is False
    assert result.failure is None
    assert result.payload["sub"] == "1"
    assert result.payload["email"] == "jane.doe@example.com"
    assert result.payload["exp"] > result.payload["iat"]


def test_token_is_rs256_signed(codec):
    token = codec.issue({"sub": "1"})
    assert jwt.get_unverified_header(token)["alg"] == "RS256"


def test_ttl_override_sets_expiry(codec):
    token = codec.issue({"sub": "1"}, ttl=timedelta(days=365))
    payload = codec.verify(token).payload
    assert payload["exp"] - payload["iat"] >= 365 * 24 * 3600 - 1


def test_expired_token_is_reported_as_expired(codec):
    token = codec.issue({"sub": "1"}, ttl=timedelta(seconds=-30))
    result = codec.verify(token)

    assert result.valid is False
    assert result.expired is True
    assert result.payload is None
    assert result.failure is TokenFailure.expired


def test_leeway_accepts_slightly_expired_token(key_pair):
    codec = TokenCodec(key_pair, leeway_seconds=120)
    token = codec.issue({"sub": "1"}, ttl=timedelta(seconds=-30))
    assert codec.verify(token).valid is True


def test_malformed_token(codec):
    result = codec.verify("definitely-not-a-jwt")

    assert result.valid is False
    assert result.expired is False
    assert result.payload is None
    assert result.failure is TokenFailure.malformed


def test_tampered_payload_fails_signature(codec):
    token = codec.issue({"sub": "1"})
    other = codec.issue({"sub": "2"})
    header, _, signature = token.split(".")
    forged = ".".join([header, other.split(".")[1], signature])

    result = codec.verify(forged)
    assert result.valid is False
    assert result.expired is False
    assert result.failure is TokenFailure.signature_invalid


def test_token_from_foreign_key_is_invalid(codec, other_key_pair):
    foreign = TokenCodec(other_key_pair).issue({"sub": "1"})
    result = codec.verify(foreign)
    assert result.valid is False
    assert result.expired is False


def test_expired_token_with_bad_signature_is_not_expired(codec, other_key_pair):
    foreign = TokenCodec(other_key_pair).issue({"sub": "1"}, ttl=timedelta(seconds=-30))
    result = codec.verify(foreign)
    assert result.expired is False
    assert result.failure is TokenFailure.signature_invalid


def test_hs256_token_is_rejected(codec):
    token = jwt.encode({"sub": "1"}, "shared-secret", algorithm="HS256")
    assert codec.verify(token).valid is False


def test_peek_claims_ignores_expiry_but_not_signature(codec, other_key_pair):
    expired = codec.issue({"sid": "abc"}, ttl=timedelta(seconds=-30))
    assert codec.peek_claims(expired)["sid"] == "abc"

    foreign = TokenCodec(other_key_pair).issue({"sid": "abc"})
    assert codec.peek_claims(foreign) is None
    assert codec.peek_claims("garbage") is None
