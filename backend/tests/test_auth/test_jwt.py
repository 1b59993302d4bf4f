"""Unit tests for JWT token creation, decoding, and validation."""

import uuid
from datetime import timedelta

import pytest
from jose import JWTError

from stayfinder.auth.jwt import (
    create_access_token,
    create_refresh_token,
    create_token_pair,
    decode_token,
    subject_from_token,
)


class TestCreateAccessToken:
    """Test access token creation."""

    def test_contains_standard_claims(self):
        payload = decode_token(create_access_token({"sub": "user-123"}))
        assert payload["type"] == "access"
        assert payload["sub"] == "user-123"
        assert "iat" in payload
        assert "exp" in payload

    def test_custom_expiry_delta(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(hours=1))
        assert decode_token(token)["sub"] == "user-123"

    def test_does_not_mutate_input(self):
        data = {"sub": "user-123"}
        create_access_token(data)
        assert data == {"sub": "user-123"}


class TestCreateRefreshToken:
    def test_contains_type_refresh(self):
        payload = decode_token(create_refresh_token({"sub": "user-xyz"}))
        assert payload["type"] == "refresh"
        assert payload["sub"] == "user-xyz"


class TestDecodeToken:
    """Test token decoding and validation."""

    def test_decode_expired_token_raises(self):
        token = create_access_token({"sub": "user-123"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_decode_invalid_token_raises(self):
        with pytest.raises(JWTError):
            decode_token("not.a.valid.token")

    def test_decode_empty_string_raises(self):
        with pytest.raises(JWTError):
            decode_token("")


class TestCreateTokenPair:
    def test_pair_types_and_subject(self):
        user_id = uuid.uuid4()
        tokens = create_token_pair(user_id, "host")

        access = decode_token(tokens["access_token"])
        refresh = decode_token(tokens["refresh_token"])

        assert tokens["token_type"] == "bearer"
        assert access["type"] == "access"
        assert refresh["type"] == "refresh"
        assert access["sub"] == refresh["sub"] == str(user_id)

    def test_role_only_on_access_token(self):
        tokens = create_token_pair(uuid.uuid4(), "host")
        assert decode_token(tokens["access_token"])["role"] == "host"
        assert "role" not in decode_token(tokens["refresh_token"])

    def test_default_role_is_guest(self):
        tokens = create_token_pair(uuid.uuid4())
        assert decode_token(tokens["access_token"])["role"] == "guest"


class TestSubjectFromToken:
    def test_matching_type(self):
        user_id = uuid.uuid4()
        tokens = create_token_pair(user_id)
        assert subject_from_token(tokens["refresh_token"], "refresh") == user_id
        assert subject_from_token(tokens["access_token"], "access") == user_id

    def test_wrong_type(self):
        tokens = create_token_pair(uuid.uuid4())
        assert subject_from_token(tokens["access_token"], "refresh") is None

    def test_non_uuid_subject(self):
        assert subject_from_token(create_access_token({"sub": "user-123"}), "access") is None

    def test_expired(self):
        token = create_access_token({"sub": str(uuid.uuid4())}, expires_delta=timedelta(seconds=-1))
        assert subject_from_token(token, "access") is None

    def test_garbage(self):
        assert subject_from_token("not.a.valid.token", "access") is None
