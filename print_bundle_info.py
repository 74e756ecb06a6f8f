"""Human readable summaries of the certificates in a PEM bundle."""
import json
import sys

from cert_fields import extract_fields, format_timestamp
from pem_bundle import iter_certificates

LABEL_WIDTH = 13


def format_names(names) -> str:
    """Render SAN entries as ``["a.example", "10.0.0.1"]``."""
    return "[" + ", ".join(json.dumps(name.value, ensure_ascii=False) for name in names) + "]"


def print_cert_info(der: bytes, out=None):
    """Write the five line report for one DER certificate to ``out``."""
    out = out if out is not None else sys.stdout
    fields = extract_fields(der)
    lines = [
        ("Subject:", fields.subject),
        ("Issuer:", fields.issuer),
        ("Not Before:", format_timestamp(fields.not_before)),
        ("Not After:", format_timestamp(fields.not_after)),
        ("DNS names:", format_names(fields.subject_alt_names)),
    ]
    for label, value in lines:
        print(f"{label:<{LABEL_WIDTH}}{value}", file=out)


def print_bundle_info(data: bytes, out=None) -> int:
    """Report every certificate in ``data`` and return how many were printed.

    Certificate blocks whose PEM armor is broken are skipped, keeping their
    index. A block that decodes but is not a certificate raises
    CertParseError.
    """
    out = out if out is not None else sys.stdout
    printed = 0
    for index, block in iter_certificates(data):
        print(f"Certificate {index}:", file=out)
        print_cert_info(block.der, out)
        printed += 1
    return printed
