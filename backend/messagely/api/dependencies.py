from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from messagely.core.errors import ServiceError
from messagely.core.security import session_issuer

# Bearer scheme - extracts token from Authorization header
# auto_error=False so a missing header gets the same 401 as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_username(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    """
    Username asserted by the request's bearer token.

    Used by route handlers to require a logged-in user. Tokens are stateless:
    the username is trusted from the signature alone, without a user lookup.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    try:
        claims = session_issuer.verify(credentials.credentials)
    except ServiceError:
        raise credentials_exception
    return claims["username"]


async def ensure_correct_user(
    username: str,
    current_username: str = Depends(get_current_username),
) -> str:
    """Allow only the user named in the path"""
    if username != current_username:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only that user can access this resource"
        )
    return current_username
