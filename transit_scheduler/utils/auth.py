"""
Authentication utilities - JWT tokens and tenant resolution
"""
import logging
from datetime import datetime, timedelta
from typing import Optional, Dict
from jose import JWTError, jwt
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from transit_scheduler.config.settings import settings

logger = logging.getLogger(__name__)

# JWT Bearer token
security = HTTPBearer()

def create_access_token(data: Dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token"""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt

def decode_access_token(token: str) -> Dict:
    """Decode and verify a JWT token"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except JWTError as e:
        logger.warning("JWT verification failed: %s. Token: %s...", e, token[:20])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Dict:
    """Get current authenticated user from JWT token"""
    payload = decode_access_token(credentials.credentials)
    # Admin tokens carry 'sub'; member tokens carry 'organization_id'
    if payload.get("sub") or payload.get("organization_id"):
        return payload

    logger.warning("Auth rejected: invalid token payload format: %s", payload)
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials"
    )

async def get_organization_id(current_user: Dict = Depends(get_current_user)) -> str:
    """Resolve the tenant every transport query is scoped to"""
    org_id = (current_user.get("organization_id") or current_user.get("sub") or "").strip()
    if not org_id:
        raise HTTPException(status_code=400, detail="Organization ID not found")
    return org_id
