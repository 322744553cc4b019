# tests/test_security.py
import uuid

import pytest
from jose import jwt

from storefront.core.config import Settings
from storefront.core.errors import AuthenticationFailed
from storefront.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

settings = Settings(JWT_SECRET="unit-test-secret")


def test_hash_and_verify():
    hashed = hash_password("correct horse", rounds=4)
    assert hashed.startswith("$2")
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_verify_against_non_bcrypt_value_is_false():
    assert verify_password("anything", "plain-text") is False


def test_token_round_trip_claims():
    user_id = uuid.uuid4()
    token = create_access_token(settings, user_id, "t@example.com")
    claims = decode_access_token(settings, token)

    assert claims["sub"] == str(user_id)
    assert claims["email"] == "t@example.com"
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_tokens_issued_together_differ():
    user_id = uuid.uuid4()
    first = create_access_token(settings, user_id, "t@example.com")
    second = create_access_token(settings, user_id, "t@example.com")
    assert first != second


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4())}, "another-secret", algorithm="HS256")
    with pytest.raises(AuthenticationFailed):
        decode_access_token(settings, token)


def test_dev_secret_is_detected():
    assert Settings(JWT_SECRET="your-secret-key").uses_dev_secret
    assert not settings.uses_dev_secret
    assert Settings(ENVIRONMENT="Production").is_production
