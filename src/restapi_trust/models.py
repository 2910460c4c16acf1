from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Literal

from .utils import colon_hex, der_to_pem, sha256_hex


Scheme = Literal["http", "https"]
OverrideName = Literal[
    "force_creation",
    "tls_server_insecure",
    "tls_server_discover_rootca",
    "tls_server_accept_rootca",
    "tls_server_accept_cn",
]

# Vocabulary order is presentation order.
OVERRIDE_NAMES: tuple[OverrideName, ...] = (
    "force_creation",
    "tls_server_insecure",
    "tls_server_discover_rootca",
    "tls_server_accept_rootca",
    "tls_server_accept_cn",
)


@dataclass(frozen=True)
class Endpoint:
    host: str
    port: int
    scheme: Scheme

    @property
    def is_secure(self) -> bool:
        return self.scheme == "https"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ClientIdentity:
    """
    TLS client certificate with its private key, both PEM files.
    """
    certfile: str
    keyfile: str | None = None


@dataclass(frozen=True)
class VerificationPolicy:
    verify_peer: bool
    verify_peer_name: bool
    capture_chain: bool = False
    client_identity: ClientIdentity | None = None
    # DER trust anchors added on top of the default store
    trusted_roots: tuple[bytes, ...] = ()
    # replaces hostname verification with a leaf CN comparison
    expected_cn: str | None = None

    @classmethod
    def insecure(cls, client_identity: ClientIdentity | None = None) -> VerificationPolicy:
        return cls(verify_peer=False, verify_peer_name=False, client_identity=client_identity)

    @classmethod
    def capture(cls, client_identity: ClientIdentity | None = None) -> VerificationPolicy:
        return cls(
            verify_peer=False,
            verify_peer_name=False,
            capture_chain=True,
            client_identity=client_identity,
        )

    @classmethod
    def secure(
        cls,
        client_identity: ClientIdentity | None = None,
        *,
        trusted_roots: Iterable[bytes] = (),
        expected_cn: str | None = None,
    ) -> VerificationPolicy:
        return cls(
            verify_peer=True,
            verify_peer_name=expected_cn is None,
            client_identity=client_identity,
            trusted_roots=tuple(trusted_roots),
            expected_cn=expected_cn,
        )


@dataclass(frozen=True)
class Certificate:
    """
    Raw DER certificate plus the common names we reason about.
    Missing CNs are the empty string.
    """
    der: bytes = field(repr=False)
    subject_cn: str
    issuer_cn: str

    @property
    def is_self_signed(self) -> bool:
        return self.subject_cn == self.issuer_cn

    @property
    def sha256(self) -> str:
        return sha256_hex(self.der)

    @property
    def pem(self) -> str:
        return der_to_pem(self.der)


@dataclass(frozen=True)
class CertificateChain:
    """
    Server-presented chain reduced to its leaf and, if self-signed, its last certificate.
    """
    leaf: Certificate
    root: Certificate | None = None


@dataclass(frozen=True)
class OverrideSet:
    names: tuple[OverrideName, ...] = ()

    @classmethod
    def of(cls, *names: OverrideName) -> OverrideSet:
        unknown = [n for n in names if n not in OVERRIDE_NAMES]
        if unknown:
            raise ValueError(f"unknown override(s): {', '.join(unknown)}")
        return cls(tuple(n for n in OVERRIDE_NAMES if n in names))

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __iter__(self) -> Iterator[OverrideName]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self.names)

    def with_(self, *names: OverrideName) -> OverrideSet:
        return OverrideSet.of(*self.names, *names)

    def ordered(self) -> list[tuple[int, OverrideName]]:
        """
        (order, name) pairs for rendering, numbered from zero.
        """
        return list(enumerate(self.names))


@dataclass(frozen=True)
class DiscoveredTrust:
    """
    Root CA found while discovering the remote's chain, held for operator review.
    """
    leaf_cn: str
    leaf_issuer_cn: str
    root: Certificate

    def to_dict(self) -> dict[str, Any]:
        return {
            "leaf_cn": self.leaf_cn,
            "leaf_issuer_cn": self.leaf_issuer_cn,
            "root_cn": self.root.subject_cn,
            "root_sha256": colon_hex(self.root.sha256),
            "root_pem": self.root.pem,
        }


@dataclass(frozen=True)
class ValidationRequest:
    baseurl: str
    client_identity_ref: str | None = None
    granted: OverrideSet = OverrideSet()


@dataclass(frozen=True)
class ValidationOutcome:
    accepted: bool
    errors: tuple[str, ...] = ()
    required_overrides: OverrideSet = OverrideSet()
    discovered: DiscoveredTrust | None = None
    trusted_root_pem: str | None = None
    accepted_cn: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "accepted": self.accepted,
            "errors": list(self.errors),
            "required_overrides": [
                {"name": name, "order": order} for order, name in self.required_overrides.ordered()
            ],
            "discovered": self.discovered.to_dict() if self.discovered else None,
            "trusted_root_pem": self.trusted_root_pem,
            "accepted_cn": self.accepted_cn,
        }
