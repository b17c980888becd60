import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from orgcms.auth import authenticate_user, create_access_token
from orgcms.config import settings
from orgcms.database import get_db
from orgcms.schemas import Token

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
):
    """
    Endpoint to generate an access token for authenticated users.
    """
    user = await authenticate_user(form_data.username, form_data.password, db)
    if not user:
        logger.warning(f"Login failed for email: {form_data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    expires = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = create_access_token(data={"sub": user.email}, expires_delta=expires)
    logger.info(f"Access token created for user: {user.email}")

    return {"access_token": access_token, "token_type": "Bearer", "expires_in": int(expires.total_seconds())}
