"""
Vulnerability probe battery.

Runs the probe catalog sequentially against the target, collects one
ProbeResult per probe into an append-only log and derives the findings,
the per-severity counts and the bounded security score.
"""

from typing import Iterable, List, Optional, Sequence

from readiness.models.results import Finding, ProbeResult, VulnerabilityReport
from readiness.probes import BaseProbe, build_probe_catalog
from readiness.utils.logger import get_logger
from readiness.config import (
    SEVERITY_ORDER,
    SEVERITY_WEIGHTS,
    SECURITY_TIERS,
    FAIL_CLOSED_ON_ERROR,
)

logger = get_logger(__name__)

GENERAL_RECOMMENDATIONS = (
    'Implement comprehensive input validation and sanitization',
    'Use parameterized queries to prevent SQL injection',
    'Implement proper authentication and session management',
    'Apply principle of least privilege for authorization',
    'Use strong cryptographic algorithms and secure configurations',
    'Implement security headers and HTTPS',
    'Regular security testing and code reviews',
    'Security awareness training for developers',
)


def security_score(severities: Iterable[str]) -> int:
    """100 minus the summed severity weights of the findings, clamped to [0, 100]."""
    penalty = sum(SEVERITY_WEIGHTS.get(severity, 0) for severity in severities)
    return max(0, min(100, 100 - penalty))


def security_tier(score: float) -> str:
    for minimum, label in SECURITY_TIERS:
        if score >= minimum:
            return label
    return SECURITY_TIERS[-1][1]


def to_finding(result: ProbeResult) -> Finding:
    definition = result.definition
    return Finding(
        test=definition.name,
        category=definition.category,
        severity=definition.severity,
        description=definition.description,
        details=result.details,
        evidence=result.evidence,
        recommendation=result.recommendation or 'Review and fix this vulnerability',
    )


def build_vulnerability_report(results: Sequence[ProbeResult]) -> VulnerabilityReport:
    """Derive the battery report from the per-probe results, in run order."""
    findings = tuple(to_finding(result) for result in results if result.vulnerable)
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    for finding in findings:
        counts[finding.severity] += 1

    score = security_score(finding.severity for finding in findings)
    return VulnerabilityReport(
        total_tests=len(results),
        findings=findings,
        severity_counts=counts,
        security_score=score,
        tier=security_tier(score),
        results=tuple(results),
        recommendations=GENERAL_RECOMMENDATIONS,
        execution_failures=sum(1 for result in results if not result.passed),
    )


class VulnerabilityBattery:
    """
    Sequential probe runner.

    Args:
        probes: Probe instances, already bound to a client
        fail_closed: Count probe execution errors as findings
    """

    def __init__(self, probes: List[BaseProbe], fail_closed: Optional[bool] = None):
        self.probes = probes
        self.fail_closed = FAIL_CLOSED_ON_ERROR if fail_closed is None else fail_closed

    @classmethod
    def for_client(cls, client, fail_closed: Optional[bool] = None) -> 'VulnerabilityBattery':
        """Battery over the full catalog bound to *client*."""
        return cls(build_probe_catalog(client), fail_closed=fail_closed)

    def run(self) -> VulnerabilityReport:
        logger.info(f"Running {len(self.probes)} vulnerability probes")
        results: List[ProbeResult] = []

        for probe in self.probes:
            logger.debug(f"Testing: {probe.definition.name}")
            result = probe.run(fail_closed=self.fail_closed)
            results.append(result)
            if result.vulnerable:
                logger.warning(
                    f"VULNERABLE [{probe.definition.severity.upper()}] "
                    f"{probe.definition.name}: {result.details}"
                )
            elif result.passed:
                logger.debug(f"Secure: {probe.definition.name}")

        report = build_vulnerability_report(results)
        logger.info(
            f"Probe battery complete. {report.vulnerabilities_found} finding(s), "
            f"security score {report.security_score}/100 ({report.tier})"
        )
        return report
