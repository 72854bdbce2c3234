"""
Admin authorization.

`/admin` is guarded by a static shared secret carried in the Authorization
header, either bare or as "Bearer <secret>". Authorizer is the seam where a
real token scheme can be plugged in later.
"""
import hmac
from abc import ABC, abstractmethod
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
import structlog

from .config import settings

logger = structlog.get_logger()

authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


class Authorizer(ABC):
    """Decides whether a presented credential grants admin access"""

    @abstractmethod
    def check(self, credential: Optional[str]) -> bool:
        pass


class SharedSecretAuthorizer(Authorizer):
    """Constant-time comparison against one configured secret"""

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("Shared secret must not be empty")
        self.secret = secret

    def check(self, credential: Optional[str]) -> bool:
        if not credential:
            return False
        token = credential.strip()
        scheme, _, rest = token.partition(" ")
        if scheme.lower() == "bearer" and rest:
            token = rest.strip()
        return hmac.compare_digest(token.encode(), self.secret.encode())


def get_authorizer() -> Authorizer:
    return SharedSecretAuthorizer(settings.ADMIN_TOKEN)


async def require_admin(
    credential: Optional[str] = Depends(authorization_header),
    authorizer: Authorizer = Depends(get_authorizer),
) -> None:
    if not authorizer.check(credential):
        logger.warning("Admin access denied", credential_present=bool(credential))
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access forbidden")
