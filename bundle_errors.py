"""Errors raised while reading, splitting or inspecting certificate bundles."""


class BundleError(Exception):
    """Base class for every failure the bundle tools report."""


class BundleIOError(BundleError):
    """A bundle could not be read or an output file could not be written."""


class MalformedPem(BundleError):
    """The PEM framing or base64 body of a bundle is broken."""


class CertParseError(BundleError):
    """A DER blob is not a well-formed X.509 certificate."""
