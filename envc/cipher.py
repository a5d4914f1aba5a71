import base64
import binascii
import logging
import os

import attr
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import DecryptionError

log = logging.getLogger(__name__)

KEY_SIZE = 32
SALT_SIZE = 16
NONCE_SIZE = 12
TAG_SIZE = 16
DEFAULT_ITERATIONS = 200_000

# Shortest base64 text treated as a possible ciphertext.
MIN_ENCRYPTED_LENGTH = 8


@attr.s(frozen=True)
class Password:
    """
    A password that is only revealed to the key derivation function.

    The value is excluded from repr() and str() so it can't end up in a
    traceback, log line or error message by accident.
    """
    value: str = attr.ib(repr=False)

    def __str__(self):
        return '********'

    def __bool__(self):
        return bool(self.value)

    def expose(self) -> bytes:
        return self.value.encode('utf-8')


@attr.s(frozen=True)
class Cipher:
    """
    AES-256-GCM with a key derived from a password by PBKDF2-HMAC-SHA256.

    Every value gets its own random salt and nonce, so encrypting the same
    value twice gives different text. The stored form is
    base64(salt + nonce + ciphertext + tag).
    """
    password: Password = attr.ib()
    iterations: int = attr.ib(default=DEFAULT_ITERATIONS)

    def derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_SIZE,
            salt=salt,
            iterations=self.iterations)
        return kdf.derive(self.password.expose())

    def encrypt(self, value: str) -> str:
        """Encrypt a single value, ignoring surrounding whitespace."""
        salt = os.urandom(SALT_SIZE)
        nonce = os.urandom(NONCE_SIZE)
        aes = AESGCM(self.derive_key(salt))
        ciphertext = aes.encrypt(nonce, value.strip().encode('utf-8'), None)
        return base64.b64encode(salt + nonce + ciphertext).decode('ascii')

    def decrypt(self, encrypted: str) -> str:
        """
        Decrypt a single base64 value.

        A wrong password and a value that was never produced by encrypt()
        raise the same DecryptionError.
        """
        try:
            data = base64.b64decode(encrypted.strip(), validate=True)
        except (binascii.Error, ValueError):
            raise DecryptionError() from None

        if len(data) < SALT_SIZE + NONCE_SIZE + TAG_SIZE:
            raise DecryptionError()

        salt = data[:SALT_SIZE]
        nonce = data[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
        ciphertext = data[SALT_SIZE + NONCE_SIZE:]

        try:
            plaintext = AESGCM(self.derive_key(salt)).decrypt(nonce, ciphertext, None)
            return plaintext.decode('utf-8')
        except (InvalidTag, UnicodeDecodeError):
            raise DecryptionError() from None


def is_likely_encrypted(value: str) -> bool:
    """
    Guess whether a value is ciphertext: valid base64 of a reasonable length.

    This only looks at the encoding, so short ciphertexts and long plaintext
    that happens to be valid base64 are misclassified.
    """
    trimmed = value.strip()
    if not trimmed:
        return False

    try:
        base64.b64decode(trimmed, validate=True)
    except (binascii.Error, ValueError):
        return False

    return len(trimmed) >= MIN_ENCRYPTED_LENGTH


def encrypt(value: str, password: Password) -> str:
    return Cipher(password).encrypt(value)


def decrypt(encrypted: str, password: Password) -> str:
    return Cipher(password).decrypt(encrypted)
