"""
API key wire format: "bst_<8 chars>.<32 chars>".

Both halves come from the URL-safe base64 alphabet, which never contains
".", so the first "." always separates prefix from secret.
"""

import secrets
from typing import Optional, Tuple

KEY_PREFIX_MARKER = "bst_"
MIN_KEY_LENGTH = 13


def generate_api_key() -> Tuple[str, str, str]:
    """Returns (prefix, secret, full_key)"""
    prefix = KEY_PREFIX_MARKER + secrets.token_urlsafe(6)[:8]
    secret = secrets.token_urlsafe(24)[:32]
    return prefix, secret, f"{prefix}.{secret}"


def split_api_key(full_key: str) -> Optional[Tuple[str, str]]:
    """Returns (prefix, secret), or None if the key is malformed"""
    if not full_key or len(full_key) < MIN_KEY_LENGTH:
        return None
    prefix, dot, secret = full_key.partition(".")
    if not dot or not prefix or not secret:
        return None
    return prefix, secret
