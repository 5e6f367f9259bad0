"""Helpers for reading Apple signing certificates."""

from __future__ import annotations

from cryptography import x509


def subject_value(cert: x509.Certificate, oid: x509.ObjectIdentifier) -> str | None:
    """Return the first subject attribute for `oid`, stripped, or None when blank."""
    attrs = cert.subject.get_attributes_for_oid(oid)
    if not attrs:
        return None
    value = attrs[0].value
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    return value.strip() or None
