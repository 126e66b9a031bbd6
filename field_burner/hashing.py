"""Content hashing used for the before/after integrity fingerprints.

The hashes are fingerprints only; nothing here signs a document.
"""

import hashlib
from typing import Union


def content_hash(data: Union[bytes, bytearray]) -> str:
    """Return the SHA-256 hex digest of ``data``."""
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError(f'content_hash expects bytes, got {type(data).__name__}')
    return hashlib.sha256(data).hexdigest()
