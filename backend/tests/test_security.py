import pytest
from jose import jwt

from messagely.core.errors import ErrorKind, ServiceError
from messagely.core.security import PasswordHasher, SessionIssuer


@pytest.fixture
def hasher():
    return PasswordHasher(work_factor=4)


def test_hash_is_not_plaintext_and_is_salted(hasher):
    first = hasher.hash("hunter2")
    second = hasher.hash("hunter2")
    assert first != "hunter2"
    assert first != second


def test_verify_accepts_right_secret_and_rejects_wrong_one(hasher):
    hashed = hasher.hash("hunter2")
    assert hasher.verify("hunter2", hashed) is True
    assert hasher.verify("hunter3", hashed) is False


@pytest.mark.parametrize("missing", [None, ""])
def test_verify_without_stored_hash_is_false(hasher, missing):
    assert hasher.verify("anything", missing) is False


def test_verify_with_malformed_hash_is_false(hasher):
    assert hasher.verify("anything", "not-a-bcrypt-hash") is False


def test_work_factor_is_embedded_in_hash(hasher):
    # bcrypt format: $2b$<rounds>$...
    assert hasher.hash("pw").split("$")[2] == "04"


def test_token_round_trip():
    issuer = SessionIssuer("k1")
    token = issuer.issue("alice")
    assert issuer.verify(token) == {"username": "alice"}


def test_token_carries_issued_at_and_no_expiry():
    issuer = SessionIssuer("k1")
    claims = jwt.get_unverified_claims(issuer.issue("alice"))
    assert claims["username"] == "alice"
    assert isinstance(claims["iat"], int)
    assert "exp" not in claims


def test_token_signed_with_other_key_is_invalid():
    token = SessionIssuer("k1").issue("alice")
    with pytest.raises(ServiceError) as exc_info:
        SessionIssuer("k2").verify(token)
    assert exc_info.value.kind is ErrorKind.INVALID_TOKEN


def test_tampered_token_is_invalid():
    issuer = SessionIssuer("k1")
    header, payload, signature = issuer.issue("alice").split(".")
    forged = jwt.encode({"username": "mallory"}, "other")
    forged_payload = forged.split(".")[1]
    with pytest.raises(ServiceError) as exc_info:
        issuer.verify(f"{header}.{forged_payload}.{signature}")
    assert exc_info.value.kind is ErrorKind.INVALID_TOKEN


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_token_is_invalid(token):
    with pytest.raises(ServiceError) as exc_info:
        SessionIssuer("k1").verify(token)
    assert exc_info.value.kind is ErrorKind.INVALID_TOKEN


def test_token_without_username_claim_is_invalid():
    token = jwt.encode({"sub": "alice"}, "k1", algorithm="HS256")
    with pytest.raises(ServiceError) as exc_info:
        SessionIssuer("k1").verify(token)
    assert exc_info.value.kind is ErrorKind.INVALID_TOKEN
