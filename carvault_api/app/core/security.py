"""
Security helpers for password hashing and JWT authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC‑SHA256 signatures and base64url encoding.  Tokens carry the
user id in the ``sub`` claim and an expiration timestamp (``exp``).  A
secret key from the application settings is used to sign and verify
the token.  Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random
per‑password salt.

``get_current_user`` is the FastAPI dependency every protected
endpoint uses; it fails closed on any malformed, expired or forged
token and on tokens whose user no longer exists.
"""

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_connection
from .exceptions import UnauthorizedError


PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    """Compute HMAC‑SHA256 signature of a message using the given secret."""
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed JWT token with the given payload.

    The payload is extended with ``iat`` and ``exp`` fields holding
    UNIX timestamps.  The token is a string of the form
    ``header.payload.signature``, where each part is base64url
    encoded.  Clients must include this token in the ``Authorization``
    header as ``Bearer <token>``.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. ``{"sub": user_id}``).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        A signed JWT token.
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = settings.access_token_expire_minutes * 60
    now = int(time.time())
    to_encode["iat"] = now
    to_encode["exp"] = now + expires_delta
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a JWT token.

    Splits the token into header, payload and signature, checks that
    the header announces HS256, verifies the HMAC signature and checks
    the ``exp`` field.  If validation succeeds, returns the payload
    dictionary; otherwise returns ``None``.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    try:
        header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
        if not isinstance(header, dict) or header.get("alg") != "HS256":
            return None
        signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
        expected_sig = _sign(signing_input, settings.secret_key)
        actual_sig = _b64_url_decode(signature_b64)
        # Constant‑time comparison
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict):
            return None
        if data.get("exp") is None or int(data["exp"]) < int(time.time()):
            return None
    except (ValueError, TypeError, OverflowError):
        # binascii.Error and json.JSONDecodeError are ValueError subclasses
        return None
    return data


security = HTTPBearer(auto_error=False)


def verify_token(token: str) -> str:
    """Return the user id carried by ``token``.

    Raises ``UnauthorizedError`` if the token is invalid, expired or
    refers to a user that does not exist.
    """
    payload = decode_access_token(token)
    if not payload or not isinstance(payload.get("sub"), str):
        raise UnauthorizedError("Invalid or expired token")
    conn = get_connection()
    try:
        row = conn.execute(
            "SELECT id FROM users WHERE id = ?", (payload["sub"],)
        ).fetchone()
    finally:
        conn.close()
    if not row:
        raise UnauthorizedError("User no longer exists")
    return row["id"]


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Dict[str, Any]:
    """Dependency that retrieves the current authenticated user.

    If the request does not contain a bearer ``Authorization`` header
    or the token is invalid/expired, ``UnauthorizedError`` (HTTP 401)
    is raised.  On success returns a dict with the ``user_id`` of the
    caller, which services use to scope every query.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    return {"user_id": verify_token(credentials.credentials)}


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    A 16‑byte random salt is generated for each password.  The
    resulting string contains the salt and hash separated by a
    ``$`` (salt in hex, then hash in hex).

    Parameters
    ----------
    password : str
        The plain text password to hash.

    Returns
    -------
    str
        Salt and hash concatenated with ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored salt+hash string.

    Splits the stored string into salt and hash, recomputes the
    PBKDF2‑HMAC digest and compares it using constant‑time comparison.
    Malformed stored values never match.
    """
    salt_hex, sep, hash_hex = hashed_password.partition("$")
    if not sep:
        return False
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
