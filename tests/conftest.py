import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import ExtensionOID, NameOID

UTC = datetime.timezone.utc

# (common name, not before, not after) for the certificates in ca-bundle.crt
CA_BUNDLE = [
    ("Test CA 1", datetime.datetime(2025, 1, 10, 13, 18, 59, tzinfo=UTC), datetime.datetime(2026, 1, 10, 13, 18, 59, tzinfo=UTC)),
    ("Test CA 2", datetime.datetime(2025, 1, 10, 13, 19, 0, tzinfo=UTC), datetime.datetime(2027, 1, 10, 13, 19, 0, tzinfo=UTC)),
    ("Test CA 3", datetime.datetime(2025, 1, 10, 13, 19, 0, tzinfo=UTC), datetime.datetime(2028, 1, 10, 13, 19, 0, tzinfo=UTC)),
    ("Test CA 4", datetime.datetime(2025, 1, 10, 13, 19, 1, tzinfo=UTC), datetime.datetime(2029, 1, 9, 13, 19, 1, tzinfo=UTC)),
    ("Test CA 5", datetime.datetime(2025, 1, 10, 13, 19, 2, tzinfo=UTC), datetime.datetime(2030, 1, 9, 13, 19, 2, tzinfo=UTC)),
]


def make_cert(common_name="Test CA 1", not_before=None, not_after=None, extensions=(), name=None):
    """Self-signed certificate; ``extensions`` go in as given, duplicates included."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = name or x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    builder = x509.CertificateBuilder(
        issuer_name=name,
        subject_name=name,
        public_key=key.public_key(),
        serial_number=x509.random_serial_number(),
        not_valid_before=not_before or CA_BUNDLE[0][1],
        not_valid_after=not_after or CA_BUNDLE[0][2],
        extensions=list(extensions),
    )
    return builder.sign(key, hashes.SHA256())


def san_extension(*names):
    return x509.Extension(ExtensionOID.SUBJECT_ALTERNATIVE_NAME, False, x509.SubjectAlternativeName(list(names)))


def raw_san_extension(value):
    """SAN extension carrying ``value`` verbatim, so it can hold entries cryptography would refuse."""
    oid = ExtensionOID.SUBJECT_ALTERNATIVE_NAME
    return x509.Extension(oid, False, x509.UnrecognizedExtension(oid, value))


def der(cert):
    return cert.public_bytes(serialization.Encoding.DER)


def pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM)


@pytest.fixture(scope="session")
def ca_certs():
    return [make_cert(cn, nb, na) for cn, nb, na in CA_BUNDLE]


@pytest.fixture
def ca_bundle(tmp_path, ca_certs):
    path = tmp_path / "ca-bundle.crt"
    path.write_bytes(b"".join(pem(cert) for cert in ca_certs))
    return path
