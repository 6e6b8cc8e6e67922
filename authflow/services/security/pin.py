"""PIN hashing and verification

Stored format: "<iterations>.<salt_b64>.<hash_b64>" (PBKDF2-SHA256).
"""
import base64
import hashlib
import hmac
import logging
import secrets

logger = logging.getLogger(__name__)

ITERATIONS = 100_000
SALT_BYTES = 16


def validate_pin_format(pin: str, min_length: int, max_length: int) -> None:
    """Raises ValueError unless the PIN is all digits within the length bounds"""
    if not isinstance(pin, str) or not pin.isdigit():
        raise ValueError("PIN must contain digits only")
    if not min_length <= len(pin) <= max_length:
        raise ValueError(f"PIN must be {min_length}-{max_length} digits")


def _derive(pin: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", pin.encode("utf-8"), salt, iterations)


def hash_pin(pin: str, iterations: int = ITERATIONS) -> str:
    salt = secrets.token_bytes(SALT_BYTES)
    digest = _derive(pin, salt, iterations)
    return "{}.{}.{}".format(
        iterations,
        base64.b64encode(salt).decode("ascii"),
        base64.b64encode(digest).decode("ascii"),
    )


def verify_pin(pin: str, stored_hash: str) -> bool:
    parts = stored_hash.split(".")
    if len(parts) != 3:
        logger.error("Invalid stored PIN hash format")
        return False

    iterations, salt_b64, hash_b64 = parts
    try:
        salt = base64.b64decode(salt_b64)
        expected = base64.b64decode(hash_b64)
        digest = _derive(pin, salt, int(iterations))
    except ValueError:
        logger.error("Invalid components in stored PIN hash")
        return False

    return hmac.compare_digest(digest, expected)
