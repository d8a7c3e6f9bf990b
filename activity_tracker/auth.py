"""Authentication utilities for JWT token validation using Supabase JWKS"""
import json
import logging
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Header, HTTPException
from jose import jwt, JWTError

from activity_tracker import config

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_supabase_jwks() -> dict:
    """
    Fetch and cache the Supabase JWKS (JSON Web Key Set).

    The endpoint is public; the result is cached for the process lifetime.
    """
    if not config.SUPABASE_URL:
        raise ValueError("SUPABASE_URL not configured")

    jwks_url = f"{config.SUPABASE_URL}/auth/v1/.well-known/jwks.json"

    try:
        logger.info(f"Fetching JWKS from: {jwks_url}")
        response = httpx.get(jwks_url, timeout=10.0)
        response.raise_for_status()
        return response.json()
    except Exception as e:
        logger.error(f"Failed to fetch JWKS from {jwks_url}: {e}")
        raise ValueError(f"Failed to fetch Supabase JWKS: {e}")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail)


def decode_user_id(token: str, jwks: dict) -> str:
    """Verify a Supabase access token against jwks and return its 'sub' claim"""
    kid = jwt.get_unverified_header(token).get('kid')
    if not kid:
        raise _unauthorized("Invalid token: missing key ID")

    jwk = next((key for key in jwks.get('keys', []) if key.get('kid') == kid), None)
    if not jwk:
        logger.warning(f"No matching key found for kid: {kid}")
        raise _unauthorized("Invalid token: key not found")

    payload = jwt.decode(
        token,
        json.dumps(jwk),
        algorithms=[jwk.get('alg', 'RS256')],
        options={
            "verify_signature": True,
            "verify_exp": True,
            "verify_aud": False  # Supabase tokens may not have aud
        }
    )

    user_id = payload.get('sub')
    if not user_id:
        raise _unauthorized("Invalid token: missing user ID")
    return user_id


async def get_current_user_id(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> str:
    """
    FastAPI dependency returning the authenticated user's id.

    Raises:
        HTTPException: 401 for a missing, malformed, invalid or expired token,
            500 when authentication is not configured
    """
    if not authorization:
        raise _unauthorized("Authorization header is required")

    if not authorization.startswith('Bearer '):
        raise _unauthorized("Authorization header must start with 'Bearer '")

    token = authorization.split('Bearer ')[1]

    try:
        return decode_user_id(token, get_supabase_jwks())
    except HTTPException:
        raise
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {str(e)}")
        raise _unauthorized("Invalid authentication token")
    except ValueError as e:
        logger.error(f"Configuration error: {str(e)}")
        raise HTTPException(
            status_code=500,
            detail="Authentication is not properly configured"
        )
