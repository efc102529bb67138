"""Fixed-key 64-bit content hashing for documents."""

import hashlib

HASH_KEY = b"0123456789ABCDEF0123456789ABCDEF"


def hash_content(data: bytes | str) -> int:
    """64-bit keyed BLAKE2b digest of ``data`` as an unsigned int."""
    if isinstance(data, str):
        data = data.encode("utf-8", "surrogateescape")
    digest = hashlib.blake2b(data, key=HASH_KEY, digest_size=8).digest()
    return int.from_bytes(digest, "big")
