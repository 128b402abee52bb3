"""bcrypt password hashing."""

import bcrypt

from core.config import settings


class BcryptPasswordHasher:
    """Hashes passwords with bcrypt.

    bcrypt only looks at the first 72 bytes of a password; longer input is
    truncated before hashing so newer bcrypt releases do not reject it.
    """

    MAX_PASSWORD_BYTES = 72

    def __init__(self, rounds: int = settings.bcrypt_rounds) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(self._encode(password), hashed.encode("utf-8"))
        except ValueError:
            return False

    def _encode(self, password: str) -> bytes:
        return password.encode("utf-8")[: self.MAX_PASSWORD_BYTES]
