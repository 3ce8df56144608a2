"""
Abstract base class for all vulnerability probes.

Each probe is one named, tagged variant of the catalog: it carries its own
ProbeDefinition and implements check(). The battery only ever calls run(),
which turns any failure inside check() into a well-formed ProbeResult.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Dict, Iterable, Optional

from readiness.models.results import ProbeDefinition, ProbeResult, ReadinessError
from readiness.utils.http import ProbeResponse
from readiness.utils.logger import get_logger

logger = get_logger(__name__)


class TargetUnreachable(ReadinessError):
    """A probe could not get any response from the target."""


class BaseProbe(ABC):
    """
    Abstract probe that defines the interface for every catalog entry.

    Subclasses set the class attributes and implement check(). Parameterized
    probes may override name and description per instance.
    """

    name: str = ""
    category: str = ""
    severity: str = "info"
    description: str = ""
    recommendation: str = "Review and fix this vulnerability"

    def __init__(self, client, name: Optional[str] = None, description: Optional[str] = None):
        """
        Args:
            client: Probe client exposing base_url and request()
            name: Optional per-instance name override
            description: Optional per-instance description override
        """
        self.client = client
        self.definition = ProbeDefinition(
            name=name or self.name,
            category=self.category,
            severity=self.severity,
            description=description or self.description,
        )

    @abstractmethod
    def check(self) -> ProbeResult:
        """Issue the probe's requests and classify the responses."""
        ...

    def run(self, fail_closed: bool = False) -> ProbeResult:
        """
        Execute the probe. Never raises.

        Args:
            fail_closed: Report an execution error as a finding instead of
                as "no evidence"

        Returns:
            ProbeResult bound to this probe's definition
        """
        try:
            result = self.check()
        except TargetUnreachable as e:
            logger.warning(f"[{self.definition.name}] target unreachable: {e}")
            result = ProbeResult(
                passed=False,
                vulnerable=False,
                details=f"target unreachable: {e}",
            )
        except Exception as e:
            logger.error(f"[{self.definition.name}] execution failed: {e}")
            result = ProbeResult(
                passed=False,
                vulnerable=fail_closed,
                details=f"execution failed: {e}",
                recommendation=(
                    "Probe could not complete; verify this control manually" if fail_closed else None
                ),
            )
        return replace(result, definition=self.definition)

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------
    def _send(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> ProbeResponse:
        """Issue one request; raise TargetUnreachable on transport failure."""
        response = self.client.request(method, path, body=body, headers=headers)
        if not response.ok:
            raise TargetUnreachable(f"{method} {path}: {response.error}")
        return response

    def _try_send(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[ProbeResponse]:
        """Issue one request; None on transport failure."""
        response = self.client.request(method, path, body=body, headers=headers)
        return response if response.ok else None

    @staticmethod
    def _first_match(patterns: Iterable[str], text: str) -> Optional[str]:
        """Return the first regex in *patterns* found in *text* (case-insensitive)."""
        for pattern in patterns:
            if re.search(pattern, text or "", re.IGNORECASE):
                return pattern
        return None

    def _vulnerable(self, details: str, evidence: Optional[Dict[str, Any]] = None,
                    recommendation: Optional[str] = None) -> ProbeResult:
        return ProbeResult(
            passed=True,
            vulnerable=True,
            details=details,
            evidence=evidence,
            recommendation=recommendation or self.recommendation,
        )

    @staticmethod
    def _secure(details: str, evidence: Optional[Dict[str, Any]] = None) -> ProbeResult:
        return ProbeResult(passed=True, vulnerable=False, details=details, evidence=evidence)
