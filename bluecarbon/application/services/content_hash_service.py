"""BLAKE3 evidence fingerprints.

The lifecycle controller stores hash_hex(image) on every new submission;
verify_hash() lets a reviewer check a stored image against it.
"""

from __future__ import annotations

import hmac

import blake3

DIGEST_SIZE = 32
HEX_DIGEST_LENGTH = DIGEST_SIZE * 2


class Blake3ContentHashService:
    """ContentHashServiceProtocol over unkeyed BLAKE3."""

    def hash_content(self, content: bytes) -> bytes:
        return blake3.blake3(content).digest()

    def hash_hex(self, content: bytes) -> str:
        return blake3.blake3(content).hexdigest()

    def verify_hash(self, content: bytes, expected_hex: str) -> bool:
        """Whether content hashes to expected_hex (case-insensitive).

        Raises:
            ValueError: If expected_hex is not 64 hex characters long.
        """
        if len(expected_hex) != HEX_DIGEST_LENGTH:
            raise ValueError(
                f"Evidence hash must be {HEX_DIGEST_LENGTH} hex characters, "
                f"got {len(expected_hex)}"
            )
        return hmac.compare_digest(self.hash_hex(content), expected_hex.lower())
