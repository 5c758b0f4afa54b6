"""Evidence fingerprint port.

Each submission stores the hex digest of its evidence image (the
"blockchain hash"). Two uploads of the same bytes share a digest.
"""

from __future__ import annotations

from typing import Protocol


class ContentHashServiceProtocol(Protocol):
    """Deterministic digest of evidence image bytes."""

    def hash_content(self, content: bytes) -> bytes: ...

    def hash_hex(self, content: bytes) -> str:
        """Lowercase hex form of hash_content(); stored on submissions."""
        ...
