import os
from fastapi import Header, HTTPException
from jose import JWTError, jwt

import orders_service.config  # noqa: F401  loads .env


def verify_token(authorization: str = Header(...)):
    """Admin routes take an HS256 bearer token signed with JWT_SECRET."""
    secret = os.getenv("JWT_SECRET")
    try:
        scheme, token = authorization.split()
        if scheme.lower() != "bearer" or not secret:
            raise ValueError("unsupported authorization")
        return jwt.decode(token, secret, algorithms=["HS256"])
    except (ValueError, JWTError):
        raise HTTPException(status_code=401, detail="Invalid or missing token")
