from __future__ import annotations

from typing import Iterable, Literal

from .models import OVERRIDE_NAMES, OverrideName, OverrideSet

FailurePoint = Literal["malformed", "tcp", "client_identity", "insecure_tls", "discovery", "secure_tls"]

_TRUST_ESCALATION: tuple[OverrideName, ...] = (
    "force_creation",
    "tls_server_insecure",
    "tls_server_discover_rootca",
)

_REQUIRED: dict[FailurePoint, tuple[OverrideName, ...]] = {
    "malformed": (),
    "tcp": ("force_creation",),
    "client_identity": ("force_creation",),
    "insecure_tls": ("force_creation",),
    "discovery": _TRUST_ESCALATION,
    "secure_tls": _TRUST_ESCALATION,
}


def required_overrides(point: FailurePoint, extra: Iterable[OverrideName] = ()) -> OverrideSet:
    """
    Minimal override set to offer after failing at the given point.
    Only secure_tls accepts extras (the review overrides for a discovered root).
    """
    extra = tuple(extra)
    if extra and point != "secure_tls":
        raise ValueError(f"no extra overrides apply to a {point} failure")
    return OverrideSet.of(*_REQUIRED[point], *extra)


def parse_overrides(names: Iterable[str]) -> OverrideSet:
    """
    Validate operator-supplied override names. Blank entries are ignored.
    """
    cleaned = [n.strip() for n in names if n and n.strip()]
    unknown = sorted({n for n in cleaned if n not in OVERRIDE_NAMES})
    if unknown:
        raise ValueError(
            f"unknown override(s): {', '.join(unknown)} (choose from {', '.join(OVERRIDE_NAMES)})"
        )
    return OverrideSet.of(*cleaned)  # type: ignore[arg-type]
