import binascii
import hashlib
import hmac
import os

PBKDF2_ALGORITHM = "pbkdf2_sha256"
PBKDF2_ITERATIONS = 100_000


def _derive(password: str, salt: str, iterations: int) -> str:
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), iterations)
    return binascii.hexlify(dk).decode()


def hash_password(password: str, salt: str | None = None, iterations: int = PBKDF2_ITERATIONS) -> str:
    """
    PBKDF2-HMAC-SHA256 with a random salt.
    Returns "pbkdf2_sha256$<iterations>$<salt>$<hash>" so the parameters travel with the digest.
    """
    if salt is None:
        salt = binascii.hexlify(os.urandom(16)).decode()
    return f"{PBKDF2_ALGORITHM}${iterations}${salt}${_derive(password, salt, iterations)}"


def verify_password(password: str, stored: str | None) -> bool:
    if not stored:
        return False
    try:
        algorithm, iterations, salt, expected = stored.split("$", 3)
        rounds = int(iterations)
    except ValueError:
        return False
    if algorithm != PBKDF2_ALGORITHM:
        return False
    return hmac.compare_digest(_derive(password, salt, rounds), expected)
