from __future__ import annotations

import logging
import ssl
from typing import Sequence

from .certs import parse_certificate
from .errors import CertificateChainError
from .models import CertificateChain, ClientIdentity, Endpoint, VerificationPolicy
from .probes import open_tls

logger = logging.getLogger(__name__)


def build_chain(ders: Sequence[bytes]) -> CertificateChain:
    """
    Reduce a presented chain (leaf first) to leaf and root.
    The last certificate is kept as root only if there is more than one
    and it is self-signed. Raises ValueError on unparsable certificates.
    """
    if not ders:
        raise ValueError("empty certificate chain")

    leaf = parse_certificate(ders[0])
    root = None
    if len(ders) > 1:
        candidate = parse_certificate(ders[-1])
        if candidate.is_self_signed:
            root = candidate
        else:
            logger.debug("dropping non-self-signed chain end %r", candidate.subject_cn)
    return CertificateChain(leaf=leaf, root=root)


def fetch_presented_chain(endpoint: Endpoint, policy: VerificationPolicy, timeout: float) -> list[bytes]:
    """
    Handshake without verification and return the DER chain as presented.
    """
    with open_tls(endpoint, policy, timeout) as ssock:
        leaf_der = ssock.getpeercert(binary_form=True)
        chain_ders = list(ssock.get_unverified_chain() or [])

    # Normalize: leaf first and exactly once
    ders: list[bytes] = []
    if leaf_der:
        ders.append(leaf_der)
    for d in chain_ders:
        if d and d != leaf_der:
            ders.append(d)
    return ders


def inspect_chain(
    endpoint: Endpoint,
    timeout: float,
    client_identity: ClientIdentity | None = None,
) -> CertificateChain | CertificateChainError:
    policy = VerificationPolicy.capture(client_identity)
    logger.debug("capturing certificate chain of %s", endpoint)
    try:
        ders = fetch_presented_chain(endpoint, policy, timeout)
    except (ssl.SSLError, OSError) as e:
        return CertificateChainError(f"Unable to fetch the TLS certificate chain of {endpoint}: {e}")

    try:
        chain = build_chain(ders)
    except ValueError as e:
        return CertificateChainError(f"Unable to parse the TLS certificate chain of {endpoint}: {e}")

    logger.debug(
        "%s presented %d certificate(s), leaf CN %r, root %r",
        endpoint,
        len(ders),
        chain.leaf.subject_cn,
        chain.root.subject_cn if chain.root else None,
    )
    return chain
