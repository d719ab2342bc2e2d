"""FastAPI dependencies for authentication, roles and workshop context."""

from typing import Optional
from uuid import UUID
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.user import User, UserRole
from app.models.workshop import Workshop
from app.services.auth import decode_access_token

security = HTTPBearer(auto_error=False)


async def user_from_token(db: AsyncSession, token: str) -> Optional[User]:
    """Resolve an active user from a bearer token, or None."""
    payload = decode_access_token(token)
    if not payload:
        return None
    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        return None
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate the current user from the Bearer token.

    Raises 401 for a missing/invalid token and 403 for a disabled account.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Autenticação necessária",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await user_from_token(db, credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


def require_role(*roles: UserRole):
    """Dependency factory that checks the user has one of `roles`.

    Usage:
        @router.get("/admin-only")
        async def admin_route(user: User = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join(r.value for r in roles)}",
            )
        return current_user

    return role_checker


require_admin = require_role(UserRole.ADMIN)


async def get_current_workshop(
    x_workshop_id: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Workshop:
    """Resolve the workshop named by the x-workshop-id header.

    Admins may act on any workshop; owners only on their own.
    """
    if not x_workshop_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Autenticação necessária")

    try:
        workshop_id = UUID(x_workshop_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Oficina não encontrada")

    result = await db.execute(select(Workshop).where(Workshop.id == workshop_id))
    workshop = result.scalar_one_or_none()
    if workshop is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Oficina não encontrada")

    if current_user.role != UserRole.ADMIN and workshop.owner_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Acesso negado a esta oficina")

    return workshop
