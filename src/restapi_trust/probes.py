from __future__ import annotations

import logging
import socket
import ssl
from contextlib import contextmanager
from typing import Iterator

from .certs import parse_certificate
from .errors import ConnectivityError, TlsHandshakeError
from .models import Endpoint, VerificationPolicy

logger = logging.getLogger(__name__)

# X509_V_ERR_HOSTNAME_MISMATCH, X509_V_ERR_IP_ADDRESS_MISMATCH
_NAME_MISMATCH_CODES = frozenset({62, 64})


def make_context(policy: VerificationPolicy) -> ssl.SSLContext:
    """
    Build a client context for the policy. May raise OSError/ssl.SSLError
    while loading trust anchors or the client identity.
    """
    if not policy.verify_peer:
        # no trust store: nothing is verified
        ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    else:
        ctx = ssl.create_default_context()
        ctx.check_hostname = policy.verify_peer_name
        for der in policy.trusted_roots:
            ctx.load_verify_locations(cadata=der)

    identity = policy.client_identity
    if identity is not None:
        ctx.load_cert_chain(certfile=identity.certfile, keyfile=identity.keyfile)
    return ctx


@contextmanager
def open_tls(endpoint: Endpoint, policy: VerificationPolicy, timeout: float) -> Iterator[ssl.SSLSocket]:
    ctx = make_context(policy)
    with socket.create_connection((endpoint.host, endpoint.port), timeout=timeout) as sock:
        with ctx.wrap_socket(sock, server_hostname=endpoint.host) as ssock:
            yield ssock


def probe_tcp(endpoint: Endpoint, timeout: float) -> ConnectivityError | None:
    logger.debug("TCP probe %s (timeout %ss)", endpoint, timeout)
    try:
        with socket.create_connection((endpoint.host, endpoint.port), timeout=timeout):
            pass
    except OSError as e:
        logger.debug("TCP probe %s failed: %s", endpoint, e)
        return ConnectivityError(f"Unable to connect to {endpoint}: {e}")
    return None


def probe_tls(endpoint: Endpoint, policy: VerificationPolicy, timeout: float) -> TlsHandshakeError | None:
    logger.debug(
        "TLS probe %s (verify_peer=%s, verify_peer_name=%s, client identity=%s)",
        endpoint,
        policy.verify_peer,
        policy.verify_peer_name,
        policy.client_identity is not None,
    )
    try:
        with open_tls(endpoint, policy, timeout) as ssock:
            leaf_der = ssock.getpeercert(binary_form=True)
    except ssl.SSLCertVerificationError as e:
        logger.debug("TLS probe %s rejected the certificate: %s", endpoint, e)
        mismatch = e.verify_code in _NAME_MISMATCH_CODES
        return TlsHandshakeError(
            f"TLS handshake with {endpoint} failed: {e}",
            untrusted=not mismatch,
            hostname_mismatch=mismatch,
        )
    except (ssl.SSLError, OSError) as e:
        logger.debug("TLS probe %s failed: %s", endpoint, e)
        return TlsHandshakeError(f"TLS handshake with {endpoint} failed: {e}")

    if policy.expected_cn is not None:
        return _check_cn(endpoint, leaf_der, policy.expected_cn)
    return None


def _check_cn(endpoint: Endpoint, leaf_der: bytes | None, expected_cn: str) -> TlsHandshakeError | None:
    if not leaf_der:
        return TlsHandshakeError(f"{endpoint} did not present a certificate")
    try:
        cn = parse_certificate(leaf_der).subject_cn
    except ValueError as e:
        return TlsHandshakeError(f"cannot parse the certificate of {endpoint}: {e}")
    if cn != expected_cn:
        return TlsHandshakeError(
            f"certificate CN {cn!r} of {endpoint} does not match the accepted CN {expected_cn!r}",
            hostname_mismatch=True,
        )
    return None
