import os, bcrypt, jwt
from datetime import datetime, timedelta
from uuid import UUID

JWT_SECRET = os.getenv("JWT_SECRET", "dev_secret_change_me")
JWT_ALG = "HS256"
JWT_EXP_MIN = int(os.getenv("JWT_EXP_MIN", str(60 * 24)))

def hash_password(raw: str) -> str:
    return bcrypt.hashpw(raw.encode(), bcrypt.gensalt()).decode()

def verify_password(raw: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(raw.encode(), hashed.encode())
    except ValueError:
        # malformed stored hash
        return False

def create_token(sub: str, role: str | None = None, expires_delta: timedelta = timedelta(minutes=JWT_EXP_MIN)) -> str:
    now = datetime.utcnow()
    to_encode = {
        "sub": sub,
        "iat": now,
        "exp": now + expires_delta,
    }
    if role:
        to_encode["role"] = role
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALG)

def decode_token(token: str) -> dict:
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])

def token_subject(token: str) -> UUID:
    """User id carried in a bearer token; raises jwt.InvalidTokenError or ValueError."""
    return UUID(decode_token(token)["sub"])
