import hashlib
import logging
import secrets
import string
import bcrypt
from passlib.context import CryptContext
from datetime import datetime, timedelta
from jose import jwt, JWTError
from crosscareers.core.config import SECRET_KEY, ALGORITHM, REFRESH_TOKEN_EXPIRE_DAYS
from crosscareers.core.errors import Unauthorized

logger = logging.getLogger(__name__)

# passlib only verifies hashes written before the switch to bcrypt directly
try:
    pwd_context = CryptContext(
        schemes=["bcrypt"],
        deprecated="auto",
    )
except Exception as e:
    logger.warning(f"Failed to initialize passlib context: {e}, using bcrypt directly")
    pwd_context = None

REFERRAL_ALPHABET = string.ascii_uppercase + string.digits


def _password_bytes(password: str) -> bytes:
    """Encode a password and cut it at bcrypt's 72 byte limit on a character boundary."""
    password_bytes = password.encode("utf-8")
    if len(password_bytes) <= 72:
        return password_bytes
    logger.warning("Password exceeds 72 bytes, truncating before hashing")
    return password_bytes[:72].decode("utf-8", errors="ignore").encode("utf-8")


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Passwords longer than 72 bytes are truncated (bcrypt hard limit).

    Raises:
        ValueError: If the password cannot be hashed
    """
    try:
        return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")
    except Exception as e:
        logger.error(f"Password hashing failed: {e}", exc_info=True)
        raise ValueError("Invalid password") from e


def verify_password(password: str, hashed: str) -> bool:
    """
    Verify a password against its hash.

    Supports bcrypt-native hashes and passlib-wrapped hashes.
    """
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        if pwd_context:
            try:
                return pwd_context.verify(password, hashed)
            except Exception:
                return False
        return False


def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def create_refresh_token(user_id: int) -> str:
    return create_access_token(
        {"id": user_id, "type": "refresh"},
        expires_delta=timedelta(days=REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str) -> dict:
    """Decode a JWT. Raises Unauthorized if it is malformed or expired."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthorized("Invalid or expired token")


def hash_token(value: str) -> str:
    """SHA-256 hex digest used for OTPs, reset tokens and refresh tokens at rest."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def generate_otp() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def generate_reset_token() -> str:
    return secrets.token_hex(32)


def generate_referral_code(length: int = 5) -> str:
    return "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(length))
