"""
Input validators — framework-agnostic, pure functions.
"""

from __future__ import annotations

import os
import re

from bson import ObjectId

MIN_PASSWORD_LENGTH = 6

ALLOWED_IMAGE_TYPES = re.compile(r"jpeg|jpg|png|gif|webp")


def validate_object_id(value: str) -> bool:
    """Return True if *value* is a 24-character hex MongoDB ObjectId."""
    return bool(re.fullmatch(r"[0-9a-fA-F]{24}", value or "")) and ObjectId.is_valid(value)


def validate_new_password(password: str) -> bool:
    """Return True if *password* is long enough to be accepted as a new password."""
    return bool(password) and len(password) >= MIN_PASSWORD_LENGTH


def validate_image_upload(filename: str, content_type: str) -> bool:
    """Return True when both the file extension and the MIME type name an image.

    Accepted: jpeg, jpg, png, gif, webp.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    return bool(
        ext
        and ALLOWED_IMAGE_TYPES.search(ext)
        and ALLOWED_IMAGE_TYPES.search((content_type or "").lower())
    )
