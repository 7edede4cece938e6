from typing import Optional

from passlib.context import CryptContext


_password_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Verified against when the email is unknown, so both login failures cost the same
_dummy_hash = _password_context.hash("fitlead-dummy-password")


def hash_password(plain_password: str) -> str:
    return _password_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if hashed_password is None:
        _password_context.verify(plain_password, _dummy_hash)
        return False
    return _password_context.verify(plain_password, hashed_password)
