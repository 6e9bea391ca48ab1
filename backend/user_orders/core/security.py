from passlib.context import CryptContext

# Returned in place of the stored password on every read path
PASSWORD_MASK = "********"


class PasswordHasher:
    """bcrypt password hashing with a configurable cost factor"""

    def __init__(self, rounds: int = 12):
        # bcrypt generates a salt per hash and embeds it in the result
        self._context = CryptContext(
            schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """Hash a password using bcrypt"""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a hash using constant-time comparison"""
        return self._context.verify(plain_password, hashed_password)
