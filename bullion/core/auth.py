"""
Bearer-token authentication interface.
Tokens are issued elsewhere; this module only decodes them so services can
stamp created_by / updated_by with the acting user.
"""

from typing import Any, Dict, Optional
from dataclasses import dataclass
import jwt
from jwt.exceptions import PyJWTError, ExpiredSignatureError
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from bullion.core.config import config
from bullion.core.exceptions import UnauthorizedError


security = HTTPBearer()


@dataclass
class TokenData:
    """Token payload data structure with type safety"""
    user_id: int
    username: str
    role: str


def verify_token(token: str) -> Optional[TokenData]:
    """
    Decode an access token.

    Returns None for a malformed or foreign token, raises UnauthorizedError
    when the signature is valid but expired.
    """
    try:
        payload: Dict[str, Any] = jwt.decode(
            token, config.jwt_secret, algorithms=[config.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except PyJWTError:
        return None

    user_id = payload.get("user_id")
    username = payload.get("sub")
    role = payload.get("role")
    if user_id is None or username is None or role is None:
        return None

    return TokenData(user_id=int(user_id), username=username, role=role)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> TokenData:
    """Dependency to get the current authenticated user from the JWT."""
    token_data = verify_token(credentials.credentials)

    if token_data is None:
        raise UnauthorizedError("Invalid authentication credentials")

    return token_data
