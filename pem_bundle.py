"""Splitting of PEM bundles into decoded blocks, and the reverse encoding."""
import base64
import binascii
import logging
import re
from collections import OrderedDict
from typing import Iterator, List, NamedTuple, Tuple, Union

from asn1crypto import pem

from bundle_errors import MalformedPem

logger = logging.getLogger(__name__)

CERTIFICATE_LABEL = "CERTIFICATE"

_BEGIN = re.compile(rb"^-----BEGIN ([^-\r\n]*)-----$")
_END = re.compile(rb"^-----END ([^-\r\n]*)-----$")
_WHITESPACE = re.compile(rb"\s+")


class PemBlock(NamedTuple):
    label: str
    der: bytes
    # RFC 1421 ``Key: value`` lines, in file order
    headers: Tuple[Tuple[str, str], ...] = ()


def _decode_body(label, headers, lines, start):
    body = _WHITESPACE.sub(b"", b"".join(lines))
    try:
        der = base64.b64decode(body, validate=True)
    except binascii.Error as e:
        return MalformedPem(f"Invalid base64 in {label} block starting on line {start}: {e}")
    return PemBlock(label, der, tuple(headers))


def _header(line):
    key, _, value = line.decode("latin-1").partition(":")
    return key.strip(), value.strip()


def _scan(data: bytes) -> Iterator[Tuple[str, Union[PemBlock, MalformedPem]]]:
    """Yield ``(label, block)`` for every armored block in ``data``.

    When a block is broken the error takes the place of the block. Text
    outside BEGIN/END markers is ignored. Header lines (``Key: value``)
    at the top of a block body are kept on the block.
    """
    label = None
    start = 0
    headers = []
    lines = []
    for lineno, line in enumerate(data.splitlines(), 1):
        line = line.strip()
        begin = _BEGIN.match(line)
        if label is None:
            if begin:
                label = begin.group(1).decode("latin-1")
                start = lineno
                headers, lines = [], []
            continue
        end = _END.match(line)
        if end:
            end_label = end.group(1).decode("latin-1")
            if end_label != label:
                yield label, MalformedPem(f"BEGIN {label} on line {start} closed by END {end_label} on line {lineno}")
            else:
                yield label, _decode_body(label, headers, lines, start)
            label = None
        elif begin:
            yield label, MalformedPem(f"{label} block starting on line {start} has no END marker")
            label = begin.group(1).decode("latin-1")
            start = lineno
            headers, lines = [], []
        elif b":" in line and not lines:
            headers.append(_header(line))
        else:
            lines.append(line)
    if label is not None:
        yield label, MalformedPem(f"{label} block starting on line {start} has no END marker")


def parse_bundle(data: bytes) -> List[PemBlock]:
    """Decode every PEM block in ``data``, in order.

    Any broken block fails the whole bundle, as does a buffer with no
    blocks at all.
    """
    blocks = []
    for _label, item in _scan(data):
        if isinstance(item, MalformedPem):
            raise item
        blocks.append(item)
    if not blocks:
        raise MalformedPem("No PEM blocks found")
    logger.debug("Parsed %d PEM block(s)", len(blocks))
    return blocks


def iter_certificates(data: bytes) -> Iterator[Tuple[int, PemBlock]]:
    """Yield ``(index, block)`` for each CERTIFICATE block in ``data``.

    Certificate blocks that cannot be decoded still use up an index but are
    skipped with a warning. Blocks with other labels are ignored entirely.
    """
    index = 0
    for label, item in _scan(data):
        if label != CERTIFICATE_LABEL:
            logger.debug("Ignoring %s block", label)
            continue
        if isinstance(item, MalformedPem):
            logger.warning("Skipping certificate %d: %s", index, item)
            index += 1
            continue
        yield index, item
        index += 1


def encode_pem(block: PemBlock) -> bytes:
    """Armor a block as PEM text with 64 column lines and LF line endings."""
    headers = OrderedDict(block.headers) if block.headers else None
    return pem.armor(block.label, block.der, headers=headers)
