"""Field extraction for DER-encoded X.509 certificates."""
import datetime
import ipaddress
import json
import logging
from typing import List, NamedTuple, Optional, Union

from asn1crypto import x509 as asn1_x509
from asn1crypto.core import Void
from cryptography import x509
from cryptography.hazmat.backends import default_backend
from cryptography.x509.oid import ExtensionOID

from bundle_errors import CertParseError

logger = logging.getLogger(__name__)


class DNSName(NamedTuple):
    value: str


class IPAddress(NamedTuple):
    value: str


class OtherName(NamedTuple):
    value: str


SubjectAltName = Union[DNSName, IPAddress, OtherName]

# asn1crypto GeneralName choice -> label used when rendering the entry
_OTHER_KINDS = {
    "rfc822_name": "RFC822Name",
    "uniform_resource_identifier": "URI",
    "directory_name": "DirectoryName",
    "registered_id": "RegisteredID",
    "other_name": "OtherName",
    "x400_address": "X400Address",
    "edi_party_name": "EDIPartyName",
}


class CertificateFields(NamedTuple):
    subject: str
    issuer: str
    not_before: datetime.datetime
    not_after: datetime.datetime
    subject_alt_names: List[SubjectAltName]


def format_ip(raw: bytes) -> str:
    """Render the raw bytes of an iPAddress general name."""
    if len(raw) == 4:
        return str(ipaddress.IPv4Address(raw))
    if len(raw) == 16:
        return str(ipaddress.IPv6Address(raw))
    return f"invalid (len={len(raw)})"


def _text(value):
    return value.contents.decode("ascii", errors="backslashreplace")


def _describe(kind, value):
    if kind == "directory_name":
        text = value.human_friendly
    elif kind == "registered_id":
        text = value.dotted
    elif kind in ("rfc822_name", "uniform_resource_identifier"):
        text = _text(value)
    else:
        text = value.contents.hex()
    return f"{_OTHER_KINDS[kind]}({json.dumps(text, ensure_ascii=False)})"


def classify_general_name(general_name: asn1_x509.GeneralName) -> SubjectAltName:
    kind = general_name.name
    value = general_name.chosen
    if kind == "dns_name":
        return DNSName(_text(value))
    if kind == "ip_address":
        return IPAddress(format_ip(value.contents))
    return OtherName(_describe(kind, value))


def _unique_extension(tbs, oid) -> Optional[asn1_x509.Extension]:
    extensions = tbs["extensions"]
    if isinstance(extensions, Void):
        return None
    found = [ext for ext in extensions if ext["extn_id"].dotted == oid.dotted_string]
    if len(found) > 1:
        raise CertParseError(f"Extension {oid.dotted_string} appears {len(found)} times")
    return found[0] if found else None


def extract_subject_alt_names(der: bytes) -> List[SubjectAltName]:
    """List the SAN entries of a certificate in extension order.

    A missing SAN extension gives an empty list. IP entries are rendered
    from their raw bytes, so unusual lengths are reported, not rejected.
    """
    try:
        cert = asn1_x509.Certificate.load(der, strict=True)
        ext = _unique_extension(cert["tbs_certificate"], ExtensionOID.SUBJECT_ALTERNATIVE_NAME)
        if ext is None:
            return []
        return [classify_general_name(name) for name in ext["extn_value"].parsed]
    except ValueError as e:
        raise CertParseError(f"Could not decode subjectAltName: {e}") from e


def format_name(name: x509.Name) -> str:
    """Render a DN in encoded order, e.g. ``C=US, O=Example Org, CN=Example CA``.

    Attributes of a multi-valued RDN are joined with ``+``.
    """
    return ", ".join("+".join(attr.rfc4514_string() for attr in rdn) for rdn in name.rdns)


def load_certificate(der: bytes) -> x509.Certificate:
    try:
        return x509.load_der_x509_certificate(der, default_backend())
    except ValueError as e:
        raise CertParseError(f"Could not parse certificate: {e}") from e


def extract_fields(der: bytes) -> CertificateFields:
    """Decode one DER certificate into the fields the info report shows."""
    cert = load_certificate(der)
    try:
        fields = CertificateFields(
            subject=format_name(cert.subject),
            issuer=format_name(cert.issuer),
            not_before=cert.not_valid_before_utc,
            not_after=cert.not_valid_after_utc,
            subject_alt_names=extract_subject_alt_names(der),
        )
    except ValueError as e:
        raise CertParseError(f"Could not read certificate fields: {e}") from e
    logger.debug("Decoded certificate %s", fields.subject)
    return fields


def format_timestamp(value: datetime.datetime) -> str:
    """Format like ``Jan 10 13:18:59 2025 +00:00``."""
    offset = value.utcoffset() or datetime.timedelta(0)
    sign = "-" if offset < datetime.timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return (
        f"{value:%b} {value.day:2d} {value:%H:%M:%S} {value.year} "
        f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"
    )
