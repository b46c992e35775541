from datetime import datetime, timedelta, timezone

import jwt
import pytest

from ccc_mocktest.core.config import config
from ccc_mocktest.core.exceptions import AuthenticationError
from ccc_mocktest.core.security import (
    create_access_token, decode_access_token, hash_password, verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("s3cret", rounds=4)

    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_same_password_gets_different_salts():
    assert hash_password("s3cret", rounds=4) != hash_password("s3cret", rounds=4)


def test_verify_rejects_plaintext_and_empty_hashes():
    assert not verify_password("s3cret", "s3cret")
    assert not verify_password("s3cret", "")
    assert not verify_password("", hash_password("s3cret", rounds=4))


def test_token_carries_id_and_role():
    token = create_access_token("abc123", "admin")
    assert decode_access_token(token) == {"id": "abc123", "role": "admin"}


def test_expired_token_rejected():
    token = jwt.encode(
        {"id": "abc", "role": "student", "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
        config.JWT_SECRET,
        algorithm=config.JWT_ALGORITHM,
    )
    with pytest.raises(AuthenticationError, match="expired"):
        decode_access_token(token)


def test_token_signed_with_other_secret_rejected():
    token = jwt.encode({"id": "abc", "role": "admin"}, "another-secret-key-of-sufficient-length", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_token_without_identity_rejected():
    token = jwt.encode({"role": "admin"}, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
    with pytest.raises(AuthenticationError):
        decode_access_token(token)


def test_garbage_token_rejected():
    with pytest.raises(AuthenticationError):
        decode_access_token("not-a-token")
