"""Reference number generation for submissions."""

from __future__ import annotations

import re
import secrets
import string

PREFIX = "EDU-"
LENGTH = 6
ALPHABET = string.ascii_uppercase + string.digits
REFERENCE_PATTERN = re.compile(rf"^{PREFIX}[A-Z0-9]{{{LENGTH}}}$")


def generate_reference_number() -> str:
    """Return a fresh `EDU-XXXXXX` reference number.

    Uniqueness is enforced by the database constraint; randomness only
    keeps collisions rare.
    """
    return PREFIX + "".join(secrets.choice(ALPHABET) for _ in range(LENGTH))


def is_reference_number(value: object) -> bool:
    return isinstance(value, str) and REFERENCE_PATTERN.match(value) is not None
