from datetime import timedelta

import pytest
from jose import jwt

from todo_auth.core.exceptions import InvalidTokenError
from todo_auth.core.security import (
    REFRESH_TOKEN_ALPHABET,
    REFRESH_TOKEN_RANDOM_LENGTH,
    TokenCodec,
    generate_refresh_token,
    get_password_hash,
    verify_password,
)


def test_verify_recovers_issued_claims(codec):
    token, claims = codec.issue(42, "bob@example.com", timedelta(minutes=10))

    payload = codec.verify(token)

    assert payload["sub"] == "42"
    assert payload["email"] == "bob@example.com"
    assert payload["jti"] == claims["jti"]
    assert payload["exp"] - payload["iat"] == 600


def test_each_issue_gets_a_fresh_jti(codec):
    _, first = codec.issue(1, "a@example.com", timedelta(minutes=1))
    _, second = codec.issue(1, "a@example.com", timedelta(minutes=1))
    assert first["jti"] != second["jti"]


def test_verify_accepts_expired_token(codec):
    token, claims = codec.issue(7, "c@example.com", timedelta(seconds=-120))

    payload = codec.verify(token)

    assert payload["jti"] == claims["jti"]


def test_decode_active_rejects_expired_token(codec):
    token, _ = codec.issue(7, "c@example.com", timedelta(seconds=-120))
    with pytest.raises(InvalidTokenError):
        codec.decode_active(token)


def test_decode_active_accepts_live_token(codec):
    token, _ = codec.issue(7, "c@example.com", timedelta(minutes=5))
    assert codec.decode_active(token)["sub"] == "7"


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_verify_rejects_malformed_input(codec, token):
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_verify_rejects_wrong_secret(codec):
    other = TokenCodec("another-secret", codec.algorithm, codec.issuer, codec.audience)
    token, _ = other.issue(1, "d@example.com", timedelta(minutes=5))
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_verify_rejects_unexpected_algorithm(codec):
    other = TokenCodec(codec.secret_key, "HS512", codec.issuer, codec.audience)
    token, _ = other.issue(1, "d@example.com", timedelta(minutes=5))
    with pytest.raises(InvalidTokenError, match="algorithm"):
        codec.verify(token)


def test_verify_rejects_non_access_token(codec):
    token = jwt.encode(
        {"sub": "1", "token_type": "refresh", "iss": codec.issuer, "aud": codec.audience},
        codec.secret_key,
        algorithm=codec.algorithm,
    )
    with pytest.raises(InvalidTokenError):
        codec.verify(token)


def test_header_algorithm_is_compared_case_insensitively(codec):
    lower = TokenCodec(codec.secret_key, "hs256", codec.issuer, codec.audience)
    token, _ = codec.issue(3, "e@example.com", timedelta(minutes=5))
    assert lower.verify(token)["sub"] == "3"


def test_refresh_token_shape():
    value = generate_refresh_token()
    random_part, suffix = value[:REFRESH_TOKEN_RANDOM_LENGTH], value[REFRESH_TOKEN_RANDOM_LENGTH:]
    assert all(ch in REFRESH_TOKEN_ALPHABET for ch in random_part)
    assert len(suffix) == 36


def test_refresh_tokens_never_collide():
    samples = [generate_refresh_token() for _ in range(10_000)]
    assert len(set(samples)) == len(samples)


def test_password_hash_roundtrip():
    hashed = get_password_hash("Sup3rSecret!")
    assert verify_password("Sup3rSecret!", hashed)
    assert not verify_password("wrong-password", hashed)
