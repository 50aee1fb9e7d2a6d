"""
Random code and file name generators — pure, side-effect-free functions.

OTP codes come from the ``secrets`` module; photo file names only need to be
unique, not unguessable, but use ``secrets`` as well.
"""

from __future__ import annotations

import os
import secrets
from datetime import datetime, timezone
from typing import Optional

OTP_MIN = 100000
OTP_MAX = 999999


def generate_otp_code() -> str:
    """Generate a uniformly random 6-digit OTP in the range 100000–999999."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def generate_photo_filename(
    owner_id: str, original_filename: str, now: Optional[datetime] = None
) -> str:
    """Build a unique profile photo file name.

    Format: ``profile_<owner_id>_<epoch-ms>-<random><ext>``; the extension is
    taken from *original_filename* and lower-cased.
    """
    moment = now or datetime.now(timezone.utc)
    epoch_ms = int(moment.timestamp() * 1000)
    ext = os.path.splitext(original_filename)[1].lower()
    return f"profile_{owner_id}_{epoch_ms}-{secrets.randbelow(10**9)}{ext}"
