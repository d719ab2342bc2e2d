"""Authentication endpoints."""

import logging
from datetime import datetime
from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import UserLogin, Token, UserOut
from app.schemas.common import ApiResponse
from app.services.auth import authenticate_user, create_access_token

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/login", response_model=ApiResponse[Token])
async def login(credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """Login with email and password.

    401 on bad credentials, 403 when the account is disabled.
    """
    user = await authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=401, detail="Email ou senha inválidos")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Conta desativada")

    user.last_login_at = datetime.utcnow()
    await db.commit()

    access_token = create_access_token(data={"sub": str(user.id), "role": user.role.value})

    logger.info("User logged in: %s (role: %s)", user.email, user.role.value)
    return ApiResponse(data=Token(access_token=access_token, user=UserOut.model_validate(user)))


@router.get("/me", response_model=ApiResponse[UserOut])
async def me(current_user: User = Depends(get_current_user)):
    return ApiResponse(data=UserOut.model_validate(current_user))
