from __future__ import annotations

import hashlib
import ssl


def der_to_pem(der: bytes) -> str:
    return ssl.DER_cert_to_PEM_cert(der)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def colon_hex(digest: str) -> str:
    """
    'ab12cd..' -> 'AB:12:CD:..', the way browsers print fingerprints.
    """
    d = digest.upper()
    return ":".join(d[i:i + 2] for i in range(0, len(d), 2))
