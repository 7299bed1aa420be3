"""FastAPI dependencies for authentication and authorization.

  get_current_user         → decode the bearer token, load the active user
  require_role(...)        → restrict to specific roles
  require_permission(...)  → restrict to holders of every listed permission
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.auth.jwt import decode_token
from firecert.auth.permissions import has_permission
from firecert.database import get_db
from firecert.models.user import User, UserRole

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Load the user named by the token.

    The decoded claims are kept on the user as `_token_payload` so
    permission checks need no second decode.
    """
    payload = decode_token(credentials.credentials) if credentials else {}
    user_id: str | None = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive",
        )

    user._token_payload = payload  # type: ignore[attr-defined]
    return user


def require_role(*roles: UserRole):
    """Dependency factory: only the listed roles may call the endpoint."""
    async def _check(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role: {', '.join(r.value for r in roles)}",
            )
        return user

    return _check


def require_permission(*perms: str):
    """Dependency factory: the token must carry every listed permission.

    Usage:
        @router.post("/{application_id}/approve")
        async def approve(user: User = Depends(require_permission("application.review"))):
            ...
    """
    async def _check(user: User = Depends(get_current_user)) -> User:
        payload: dict = getattr(user, "_token_payload", {})
        granted: list[str] = payload.get("permissions", [])
        missing = [p for p in perms if not has_permission(granted, p)]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permissions: {', '.join(missing)}",
            )
        return user

    return _check
