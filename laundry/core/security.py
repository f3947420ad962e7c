from typing import Optional, Any

from jose import JWTError, jwt

from laundry.config import Settings


def decode_token(token: str, settings: Settings) -> Optional[dict[str, Any]]:
    """
    Decode and validate a JWT token.

    Args:
        token: The JWT token to decode
        settings: Settings carrying SECRET_KEY and ALGORITHM

    Returns:
        Decoded token payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )
        return payload
    except JWTError:
        return None


def verify_access_token(token: str, settings: Settings) -> Optional[str]:
    """
    Verify an access token and return the subject (user ID).

    Tokens are issued by the authentication service; this side only
    checks signature, expiry and token type.

    Returns:
        User ID string or None if invalid
    """
    payload = decode_token(token, settings)
    if payload is None:
        return None

    if payload.get("type") != "access":
        return None

    return payload.get("sub")
