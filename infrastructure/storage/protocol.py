"""PhotoStorage protocol — services depend on this, not the concrete implementation."""

from typing import Protocol


class PhotoStorage(Protocol):
    async def save(self, owner_id: str, original_filename: str, data: bytes) -> str:
        """Store *data* and return its public path (e.g. ``/uploads/profile-photos/x.png``)."""
        ...

    async def delete(self, public_path: str) -> bool:
        """Remove a previously saved photo. ``False`` when nothing was removed."""
        ...
