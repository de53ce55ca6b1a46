"""MD5 helpers for firmware binaries."""

import hashlib
import re
from pathlib import Path
import logging

_MD5_RE = re.compile(r"^[0-9a-fA-F]{32}$")

logger = logging.getLogger("publisher.verification")


def is_md5_hex(value) -> bool:
    """True for a 32-character hexadecimal string (either case)."""
    return isinstance(value, str) and bool(_MD5_RE.match(value))


def compute_md5(file_path: Path, chunk_size: int = 64 * 1024) -> str:
    """Compute the MD5 digest of a firmware binary.

    Args:
        file_path: Binary to hash
        chunk_size: Read buffer size

    Returns:
        32-character lowercase hex digest

    Raises:
        FileNotFoundError: If file doesn't exist
        OSError: If file read fails
    """
    digest = hashlib.md5()
    try:
        with open(file_path, "rb") as f:
            while chunk := f.read(chunk_size):
                digest.update(chunk)
    except OSError as e:
        logger.error(f"Failed to read {file_path}: {e}")
        raise

    result = digest.hexdigest()
    logger.debug(f"MD5 of {Path(file_path).name}: {result}")
    return result


def verify_md5_or_raise(file_path: Path, expected_md5: str) -> None:
    """Check that a file on disk has the expected digest.

    Raises:
        ValueError: If expected_md5 is malformed or the digests differ
        FileNotFoundError: If file doesn't exist
        OSError: If file read fails
    """
    if not is_md5_hex(expected_md5):
        raise ValueError(f"Invalid MD5 format: {expected_md5} (must be 32-char hex)")

    expected_md5 = expected_md5.lower()
    actual_md5 = compute_md5(file_path)
    if actual_md5 != expected_md5:
        logger.error(
            f"MD5 mismatch for {Path(file_path).name}: "
            f"expected {expected_md5}, got {actual_md5}"
        )
        raise ValueError(f"MD5_MISMATCH: expected {expected_md5}, got {actual_md5}")

    logger.debug(f"MD5 verified for {Path(file_path).name}")
