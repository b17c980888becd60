from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt, ExpiredSignatureError
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import Optional
from orgcms.config import settings
from orgcms.database import get_db
from orgcms.middleware.logging import bind_principal
from orgcms.models.user import User
import logging

logger = logging.getLogger(__name__)

if settings.secret_key == "change-me":
    logger.warning("Using default SECRET_KEY. This is insecure and should be changed in production!")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Missing credentials resolve to an anonymous principal instead of a 401 here;
# the permission evaluator decides what anonymous callers may do.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if "sub" not in to_encode:
        raise ValueError("Missing 'sub' claim (email) in token data.")

    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[str]:
    """Return the email in the token's 'sub' claim, or None if the token is unusable."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except ExpiredSignatureError:
        logger.info("Token expired")
        return None
    except JWTError as e:
        logger.warning(f"JWT decoding failed: {str(e)}")
        return None

    email = payload.get("sub")
    if not email:
        logger.warning("Token is missing 'sub' claim")
        return None
    return email


async def authenticate_user(email: str, password: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    # Accounts without a password must sign in through their identity provider
    if not user or not user.hashed_password:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


async def get_current_principal(
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    Resolve the bearer token to a User.

    Returns None when no token is sent, the token is invalid or expired, or
    the user no longer exists.
    """
    if not token:
        return None

    email = decode_access_token(token)
    if email is None:
        return None

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalars().first()
    if user is None:
        logger.warning(f"Token subject '{email}' does not match any user")
        return None

    bind_principal(user.id, user.organization_id)
    return user
