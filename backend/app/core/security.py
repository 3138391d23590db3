"""
Caller identity from bearer JWTs
"""

import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import JWT_ALGORITHM, JWT_AUDIENCE, JWT_SECRET

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def decode_user_id(token: str) -> str:
    """
    Validate a JWT and return its subject (the user id).
    Raises HTTPException(401) for anything that is not a usable token.
    """
    options = {"verify_aud": JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except JWTError as e:
        logger.info("[auth] rejected token: %s", e)
        raise HTTPException(status_code=401, detail="Unauthorized")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return str(user_id)


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return decode_user_id(credentials.credentials)
