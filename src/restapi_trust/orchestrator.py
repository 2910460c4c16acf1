from __future__ import annotations

import logging
from typing import Callable

from .chain import inspect_chain
from .endpoint import resolve_endpoint
from .errors import (
    CertificateChainError,
    CertificateTrustError,
    MalformedEndpoint,
    ProbeFailure,
)
from .models import (
    ClientIdentity,
    DiscoveredTrust,
    OverrideName,
    ValidationOutcome,
    ValidationRequest,
    VerificationPolicy,
)
from .overrides import FailurePoint, required_overrides
from .probes import probe_tcp, probe_tls

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0

# ref -> identity, None if there is no such identity
IdentityResolver = Callable[[str], ClientIdentity | None]


def no_identities(ref: str) -> ClientIdentity | None:
    return None


class TrustDecisionOrchestrator:
    """
    Runs one validation pass over a REST API base URL.

    Stages escalate from a plain TCP connect to a fully verified TLS handshake.
    Each failure stops the pass and reports the overrides the operator may grant
    to get past it; granted overrides come back with the next request.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        resolve_identity: IdentityResolver = no_identities,
    ) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.resolve_identity = resolve_identity

    def validate(self, request: ValidationRequest) -> ValidationOutcome:
        granted = request.granted

        if "force_creation" in granted:
            logger.info("%s: connectivity checks skipped (force_creation)", request.baseurl)
            return ValidationOutcome(accepted=True)

        try:
            endpoint = resolve_endpoint(request.baseurl)
        except MalformedEndpoint as e:
            return _reject("malformed", e)

        failure = probe_tcp(endpoint, self.timeout)
        if failure is not None:
            return _reject("tcp", failure)

        if not endpoint.is_secure:
            logger.info("%s: reachable, accepted", endpoint)
            return ValidationOutcome(accepted=True)

        identity = None
        if request.client_identity_ref:
            identity = self.resolve_identity(request.client_identity_ref)
            if identity is None:
                return _reject(
                    "client_identity",
                    f"TLS client identity {request.client_identity_ref!r} does not exist",
                )

        failure = probe_tls(endpoint, VerificationPolicy.insecure(identity), self.timeout)
        if failure is not None:
            return _reject("insecure_tls", failure)

        if "tls_server_insecure" in granted:
            logger.info("%s: certificate verification waived (tls_server_insecure)", endpoint)
            return ValidationOutcome(accepted=True)

        discovered = None
        if "tls_server_discover_rootca" in granted:
            chain = inspect_chain(endpoint, self.timeout, identity)
            if isinstance(chain, CertificateChainError):
                return _reject("discovery", chain)
            if chain.leaf.is_self_signed:
                return _reject(
                    "discovery",
                    CertificateTrustError("The remote didn't provide any non-self-signed TLS certificate"),
                )
            if chain.root is None:
                return _reject(
                    "discovery",
                    CertificateTrustError("The remote didn't provide any root CA certificate"),
                )
            discovered = DiscoveredTrust(
                leaf_cn=chain.leaf.subject_cn,
                leaf_issuer_cn=chain.leaf.issuer_cn,
                root=chain.root,
            )
            logger.info("%s: discovered root CA %r for review", endpoint, discovered.root.subject_cn)

        accept_root = discovered is not None and "tls_server_accept_rootca" in granted
        accept_cn = discovered is not None and "tls_server_accept_cn" in granted
        policy = VerificationPolicy.secure(
            identity,
            trusted_roots=[discovered.root.der] if accept_root else (),
            expected_cn=discovered.leaf_cn if accept_cn else None,
        )

        failure = probe_tls(endpoint, policy, self.timeout)
        if failure is not None:
            extra: list[OverrideName] = []
            if discovered is not None:
                if accept_root or failure.untrusted:
                    extra.append("tls_server_accept_rootca")
                if accept_cn or failure.hostname_mismatch:
                    extra.append("tls_server_accept_cn")
            return _reject("secure_tls", failure, extra=extra, discovered=discovered)

        logger.info("%s: TLS certificate verified, accepted", endpoint)
        return ValidationOutcome(
            accepted=True,
            discovered=discovered,
            trusted_root_pem=discovered.root.pem if accept_root else None,
            accepted_cn=discovered.leaf_cn if accept_cn else None,
        )


def _reject(
    point: FailurePoint,
    error: ProbeFailure | Exception | str,
    *,
    extra: list[OverrideName] | None = None,
    discovered: DiscoveredTrust | None = None,
) -> ValidationOutcome:
    required = required_overrides(point, extra or ())
    logger.warning("rejected at %s: %s (offering %s)", point, error, ", ".join(required) or "nothing")
    return ValidationOutcome(
        accepted=False,
        errors=(str(error),),
        required_overrides=required,
        discovered=discovered,
    )
