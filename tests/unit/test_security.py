from __future__ import annotations

from cvtailor.core.security import hash_password, new_session_token, verify_password

FAST = "pbkdf2:sha256:1000"


def test_password_hash_round_trip() -> None:
    encoded = hash_password("s3cret!", method=FAST)

    assert encoded.startswith("pbkdf2:sha256:1000$")
    assert verify_password("s3cret!", encoded) is True
    assert verify_password("wrong", encoded) is False


def test_default_method_is_scrypt() -> None:
    encoded = hash_password("s3cret!")

    assert encoded.startswith("scrypt:")
    assert verify_password("s3cret!", encoded) is True


def test_same_password_gets_different_salts() -> None:
    assert hash_password("s3cret!", method=FAST) != hash_password("s3cret!", method=FAST)


def test_malformed_hash_never_verifies() -> None:
    assert verify_password("s3cret!", "") is False
    assert verify_password("s3cret!", "md5$abc") is False
    assert verify_password("s3cret!", "bcrypt$10$salt$digest") is False


def test_session_tokens_are_unique() -> None:
    assert len({new_session_token() for _ in range(20)}) == 20
