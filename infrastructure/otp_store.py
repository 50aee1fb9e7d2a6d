"""
Process-local store for password-reset OTP records.

One record per email; put() overwrites. Records live only in this process:
they are created at startup (empty), never persisted, and cleared on
shutdown, so a restart or a second instance does not see them.

Records are never read back directly: consume_if_match() is the only read,
and it deletes on success. The lookup, expiry check, code comparison and
deletion happen under one lock, so a code can be consumed at most once.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from shared.crypto import digests_match


@dataclass(frozen=True)
class OtpRecord:
    email: str
    code_hash: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class ConsumeResult(str, Enum):
    CONSUMED = "consumed"
    MISSING = "missing"
    MISMATCH = "mismatch"
    EXPIRED = "expired"


class InMemoryOtpStore:
    def __init__(self) -> None:
        self._records: dict[str, OtpRecord] = {}
        self._lock = threading.Lock()

    def put(self, record: OtpRecord) -> None:
        """Insert or replace the record for ``record.email``."""
        with self._lock:
            self._records[record.email] = record

    def consume_if_match(
        self, email: str, code_hash: str, now: datetime
    ) -> ConsumeResult:
        """Atomically delete the record for *email* if *code_hash* matches and it is live.

        Expired records are deleted whatever the code. A mismatched code leaves
        a live record in place.
        """
        with self._lock:
            record = self._records.get(email)
            if record is None:
                return ConsumeResult.MISSING
            if record.is_expired(now):
                del self._records[email]
                return ConsumeResult.EXPIRED
            if not digests_match(record.code_hash, code_hash):
                return ConsumeResult.MISMATCH
            del self._records[email]
            return ConsumeResult.CONSUMED

    def purge_expired(self, now: datetime) -> int:
        """Drop every expired record; returns how many were removed."""
        with self._lock:
            expired = [email for email, rec in self._records.items() if rec.is_expired(now)]
            for email in expired:
                del self._records[email]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
