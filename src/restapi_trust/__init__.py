from __future__ import annotations

from .models import OverrideSet, ValidationOutcome, ValidationRequest
from .orchestrator import TrustDecisionOrchestrator

__version__ = "0.1.0"

__all__ = [
    "OverrideSet",
    "TrustDecisionOrchestrator",
    "ValidationOutcome",
    "ValidationRequest",
    "__version__",
]
