from __future__ import annotations

from cryptography import x509
from cryptography.x509.oid import NameOID

from .models import Certificate


def common_name(name: x509.Name) -> str:
    attrs = name.get_attributes_for_oid(NameOID.COMMON_NAME)
    if not attrs:
        return ""
    value = attrs[0].value
    return value.decode("utf-8", "replace") if isinstance(value, bytes) else value


def parse_certificate(der: bytes) -> Certificate:
    """
    Parse a DER certificate. Raises ValueError on garbage.
    """
    c = x509.load_der_x509_certificate(der)
    return Certificate(der=der, subject_cn=common_name(c.subject), issuer_cn=common_name(c.issuer))
