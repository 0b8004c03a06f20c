import random
import secrets
import string
from typing import Optional

PASSWORD_LENGTH = 12
PASSWORD_ALPHABET = (
    string.ascii_uppercase
    + string.ascii_lowercase
    + string.digits
    + "!#$%&()*+,-.:;<=>?[]^_`{|}~"
)
HEX_ALPHABET = "0123456789abcdef"


class CredentialGenerator:
    """Issues fresh secrets; each call draws a new value and nothing is cached.

    Pass a seeded ``random.Random`` to get a reproducible sequence in tests.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng if rng is not None else secrets.SystemRandom()

    def password(self, length: int = PASSWORD_LENGTH) -> str:
        if length < 1:
            raise ValueError("password length must be positive")
        return "".join(self._rng.choice(PASSWORD_ALPHABET) for _ in range(length))

    def hex_token(self, length: int = PASSWORD_LENGTH) -> str:
        if length < 1:
            raise ValueError("token length must be positive")
        return "".join(self._rng.choice(HEX_ALPHABET) for _ in range(length))
