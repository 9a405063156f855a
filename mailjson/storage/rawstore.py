"""Raw message storage keyed by IMAP UID.

Every fetched message is kept byte-for-byte as ``raw/<uid>.txt`` so the
archive can be rebuilt without talking to the server again. Files are
written to a temporary name first and renamed into place, so a crashed
run never leaves a truncated message behind under its final name.
"""

import os
from pathlib import Path


class RawStore:
    """Write-once, read-many store of raw RFC 2822 messages.

    Example:
        store = RawStore(Path("archive/raw"))
        store.put(101, message_bytes)
        store.get(101)  # -> message_bytes
        store.get(999)  # -> None
    """

    def __init__(self, base_path: Path):
        self._base_path = base_path.expanduser().resolve()

    @property
    def base_path(self) -> Path:
        """Directory holding the raw message files."""
        return self._base_path

    def ensure_dir(self) -> Path:
        """Create the store directory. Safe to call multiple times."""
        self._base_path.mkdir(parents=True, exist_ok=True)
        return self._base_path

    def path_for(self, uid: int) -> Path:
        """Return the file path for a message UID."""
        return self._base_path / f"{uid}.txt"

    def put(self, uid: int, message_bytes: bytes) -> Path:
        """Persist a message's raw bytes.

        Write errors are not caught: losing a message during fetch
        aborts the run.

        Args:
            uid: Positive IMAP UID.
            message_bytes: Complete message, headers included.

        Returns:
            Path of the stored file.
        """
        if uid <= 0:
            raise ValueError(f"UID must be positive, got {uid}")

        self.ensure_dir()
        dest_path = self.path_for(uid)
        tmp_path = dest_path.with_suffix(".tmp")

        tmp_path.write_bytes(message_bytes)
        os.replace(tmp_path, dest_path)

        return dest_path

    def get(self, uid: int) -> bytes | None:
        """Return a message's raw bytes, or None if it was never fetched."""
        try:
            return self.path_for(uid).read_bytes()
        except FileNotFoundError:
            return None

    def uids(self) -> list[int]:
        """List stored UIDs in ascending order."""
        if not self._base_path.is_dir():
            return []
        return sorted(
            int(path.stem) for path in self._base_path.glob("*.txt") if path.stem.isdigit()
        )
