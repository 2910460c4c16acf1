from __future__ import annotations

from dataclasses import dataclass


class MalformedEndpoint(ValueError):
    """
    The base URL cannot be turned into an endpoint. Fatal for the pass.
    """


@dataclass(frozen=True)
class ProbeFailure:
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ConnectivityError(ProbeFailure):
    """TCP connect failed or timed out."""


@dataclass(frozen=True)
class TlsHandshakeError(ProbeFailure):
    # set from ssl.SSLCertVerificationError, only meaningful under a verifying policy
    untrusted: bool = False
    hostname_mismatch: bool = False


@dataclass(frozen=True)
class CertificateChainError(ProbeFailure):
    """Chain could not be captured or parsed."""


@dataclass(frozen=True)
class CertificateTrustError(ProbeFailure):
    """Leaf is self-signed or no acceptable root was presented."""
