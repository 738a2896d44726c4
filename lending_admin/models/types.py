import base64
import hashlib
from typing import Optional, Sequence

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from sqlalchemy import LargeBinary
from sqlalchemy.types import TypeDecorator

from lending_admin.core.settings import settings


def _derive_key(secret: str) -> bytes:
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest)


def build_cipher(secret: Optional[str] = None, previous: Optional[Sequence[str]] = None) -> MultiFernet:
    """Encrypt with the current secret; decrypt with it or any retired one.

    Rotating ``SECRET_KEY`` keeps old rows readable as long as the retired
    value is listed in ``PREVIOUS_SECRET_KEYS``.
    """
    current = secret or settings.secret_key
    retired = settings.previous_secret_keys if previous is None else previous
    keys = [current, *(key for key in retired if key and key != current)]
    return MultiFernet([Fernet(_derive_key(key)) for key in keys])


class EncryptedString(TypeDecorator):
    """Identity and bank account numbers, stored as Fernet tokens."""

    impl = LargeBinary
    cache_ok = True

    def __init__(self, *, secret: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self._secret = secret

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return build_cipher(self._secret).encrypt(str(value).encode("utf-8"))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        try:
            return build_cipher(self._secret).decrypt(bytes(value)).decode("utf-8")
        except InvalidToken as exc:
            raise ValueError("Unable to decrypt value; is the retired key listed in PREVIOUS_SECRET_KEYS?") from exc


__all__ = ["EncryptedString", "build_cipher"]
