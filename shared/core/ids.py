"""
Public identifier generation shared by every record kind.

Each entity kind owns a single-letter prefix (C customers, O orders,
G garments, D designs and deliveries, P payments). Ids look like
``D`` + base36 millisecond timestamp + random base36 suffix, which keeps
them short, roughly time ordered and practically collision free. Stores
still back them with a unique constraint and retry on collision.
"""

import secrets
import string
import time

ALPHABET = string.digits + string.ascii_uppercase
SUFFIX_LENGTH = 6


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str, suffix_length: int = SUFFIX_LENGTH) -> str:
    """Generate a prefixed public id, e.g. ``generate_id("D") -> "DMF3K2Q1ZX7P4Q"``"""
    if not prefix:
        raise ValueError("prefix is required")
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(ALPHABET) for _ in range(suffix_length))
    return f"{prefix}{_to_base36(millis)}{suffix}"
