"""Write each block of a PEM bundle to its own file."""
import logging
from pathlib import Path
from typing import Optional, Sequence

from bundle_errors import BundleIOError
from pem_bundle import PemBlock, encode_pem

logger = logging.getLogger(__name__)


def output_prefix(path, prefix: Optional[str] = None) -> str:
    """Return ``prefix``, or the bundle's file name without its last extension."""
    if prefix is not None:
        return prefix
    return Path(path).stem


def save_block(block: PemBlock, filename: str):
    # Existing files are truncated, never appended to.
    try:
        with open(filename, "wb") as f:
            f.write(encode_pem(block))
    except OSError as e:
        raise BundleIOError(f"Could not write {filename}: {e}") from e
    logger.debug("Wrote %s block to %s", block.label, filename)


def split_bundle(blocks: Sequence[PemBlock], prefix: str) -> int:
    """Write ``blocks`` to ``<prefix>-<index>.crt`` and return how many were written.

    Files are written one at a time; a failure part way through leaves the
    earlier files in place.
    """
    for i, block in enumerate(blocks):
        save_block(block, f"{prefix}-{i}.crt")
    return len(blocks)
