from passlib.context import CryptContext

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _clip(password: str) -> bytes:
    # Arabic/French passwords are multi-byte, so clip on bytes rather than characters
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    return _pwd_context.hash(_clip(password))


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context.verify(_clip(password), password_hash)
