"""
Resolves the calling user from the Authorization header.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Header
from firebase_admin import auth as firebase_auth

from backend.config import get_settings
from backend.dependencies import ensure_firebase_app
from floorplan.export import Actor

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def verify_token(token: str) -> Optional[Actor]:
    """
    Verifies a Firebase ID token.

    In in-memory mode the token itself is used as the uid, so local runs and
    tests do not need a Firebase project.
    """
    settings = get_settings()
    if settings.use_in_memory_backends:
        return Actor(uid=token)

    ensure_firebase_app()
    try:
        decoded = firebase_auth.verify_id_token(token)
    except (ValueError, firebase_auth.InvalidIdTokenError) as e:
        logger.warning("Rejected ID token: %s", e)
        return None
    return Actor(uid=decoded["uid"])


def get_current_actor(
    authorization: Optional[str] = Header(default=None),
) -> Optional[Actor]:
    """Returns the signed-in actor, or None when the request is anonymous."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    return verify_token(token)
