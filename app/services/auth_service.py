from typing import Optional
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from app.core.config import settings
from app.core.errors import AuthError

security = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        'sub': user_id,
        'role': 'authenticated',
        'iat': now,
        'exp': now + expires_delta,
    }
    if settings.AUTH_JWT_AUDIENCE:
        payload['aud'] = settings.AUTH_JWT_AUDIENCE
    return jwt.encode(payload, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id a hosted-backend access token was issued to."""
    audience = settings.AUTH_JWT_AUDIENCE or None
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=audience,
            options={'verify_aud': audience is not None},
        )
    except JWTError as exc:
        raise AuthError('Invalid authentication token') from exc

    user_id = payload.get('sub')
    if not user_id:
        raise AuthError('Invalid authentication token')
    return user_id


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if not request.headers.get('Authorization'):
        raise AuthError('Missing authorization header')
    if credentials is None or not credentials.credentials:
        raise AuthError('Invalid authentication token')
    return decode_access_token(credentials.credentials)
