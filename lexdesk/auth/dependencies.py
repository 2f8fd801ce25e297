import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError
from pydantic import ValidationError

from lexdesk.models import UserRole
from lexdesk.auth.schemas import Identity
from lexdesk.auth.utils import decode_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_identity(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise _unauthorized("No authentication token, access denied")

    try:
        return decode_token(credentials.credentials)
    except ExpiredSignatureError:
        raise _unauthorized("Token expired")
    except KeyError:
        logger.warning("Token payload is missing the user id")
        raise _unauthorized("Invalid token structure")
    except (JWTError, ValidationError) as e:
        logger.warning("JWT verification error: %s", e)
        raise _unauthorized("Token verification failed")


def require_role(allowed_roles: list[UserRole]):
    def role_checker(identity: Identity = Depends(get_current_identity)):
        if identity.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Forbidden - insufficient role"
            )
        return identity
    return role_checker


# Convenience wrapper
def require_lawyer_or_admin():
    return require_role([UserRole.LAWYER, UserRole.ADMIN])
