"""
Secret Codec

One-way hashing and verification for passwords, refresh tokens, API-key
secrets and service-account client secrets, plus generation of random
credential material.

bcrypt only reads the first 72 bytes of its input, so every plaintext is
first reduced to a base64 SHA-256 digest (44 ASCII bytes). Two different
plaintexts never share a bcrypt input, whatever their length.
"""

import base64
import hashlib
import secrets

import bcrypt


class SecretCodecError(Exception):
    """The hashing primitive failed (e.g. a corrupt stored hash)."""


class SecretCodec:
    """bcrypt-backed codec with a fixed work factor"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash = self.hash(secrets.token_urlsafe(32))

    def hash(self, plaintext: str) -> str:
        try:
            hashed = bcrypt.hashpw(self._prepare(plaintext), bcrypt.gensalt(self.rounds))
        except (ValueError, TypeError) as exc:
            raise SecretCodecError(f"bcrypt hash failed: {exc}") from exc
        return hashed.decode("ascii")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Constant-time check of plaintext against a stored hash.

        Returns False on mismatch. Raises SecretCodecError if the stored
        hash cannot be used at all; that is an internal failure, not a
        credential mismatch.
        """
        try:
            return bcrypt.checkpw(self._prepare(plaintext), hashed.encode("ascii"))
        except (ValueError, TypeError) as exc:
            raise SecretCodecError(f"bcrypt verify failed: {exc}") from exc

    def verify_dummy(self, plaintext: str) -> None:
        """
        Spend one verification when no record was found.

        Keeps "unknown identity" and "wrong secret" at the same cost so the
        response time does not reveal which one happened.
        """
        self.verify(plaintext, self._dummy_hash)

    @staticmethod
    def generate_random_token(byte_length: int = 32) -> str:
        """URL-safe random string from byte_length bytes of OS entropy"""
        return secrets.token_urlsafe(byte_length)

    @staticmethod
    def _prepare(plaintext: str) -> bytes:
        digest = hashlib.sha256(plaintext.encode("utf-8")).digest()
        return base64.b64encode(digest)
