"""
bcrypt password hasher - Implements PasswordHasher protocol.

The salt is generated per call and embedded in the bcrypt output, so no
separate salt storage is needed.
"""

import bcrypt

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher:
    """Hashes passwords with bcrypt at a configurable cost factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """
        Hash password using bcrypt with a fresh salt.

        Raises:
            ValueError: password longer than MAX_PASSWORD_BYTES once encoded
        """
        encoded = password.encode()
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check of `password` against a stored hash."""
        return bcrypt.checkpw(password.encode(), password_hash.encode())
