"""
Report aggregator.

Merges the three phase outputs into the composite score, readiness tier and
recommendation list. Every function here is pure: the composite score
depends only on the three sub-scores.
"""

from typing import Dict, List, Optional, Sequence

from readiness.models.results import (
    ComplianceReport,
    CompositeReport,
    EndpointMetric,
    VulnerabilityReport,
)
from readiness.utils.scoring import clamp, mean, round_half_up
from readiness.config import (
    PHASE_WEIGHTS,
    READINESS_TIERS,
    PERFORMANCE_RECOMMENDATION_THRESHOLD,
    SECURITY_RECOMMENDATION_THRESHOLD,
    COMPLIANCE_RECOMMENDATION_THRESHOLD,
    POSITIVE_ASSESSMENT_THRESHOLD,
)

PERFORMANCE_ADVICE = (
    'Optimize application performance and response times',
    'Implement caching and database query optimization',
)
SECURITY_ADVICE = (
    'Address security vulnerabilities identified in penetration testing',
    'Implement additional security controls and monitoring',
)
COMPLIANCE_ADVICE = (
    'Improve compliance with security frameworks (NIST, ISO27001, SOC2)',
    'Implement missing security controls and documentation',
)
POSITIVE_ASSESSMENT = (
    'Platform demonstrates enterprise-grade security and performance',
    'Suitable for production deployment with enterprise customers',
)


def performance_score(metrics: Sequence[EndpointMetric]) -> float:
    """Mean of (100 - error rate) across endpoints; 0 when nothing was load tested."""
    if not metrics:
        return 0.0
    return clamp(mean(100 - metric.error_rate for metric in metrics))


def overall_score(performance: float, security: float, compliance: float) -> int:
    weighted = (
        PHASE_WEIGHTS['performance'] * clamp(performance)
        + PHASE_WEIGHTS['security'] * clamp(security)
        + PHASE_WEIGHTS['compliance'] * clamp(compliance)
    )
    return int(clamp(round_half_up(weighted)))


def readiness_tier(score: float) -> str:
    for minimum, label in READINESS_TIERS:
        if score >= minimum:
            return label
    return READINESS_TIERS[-1][1]


def build_recommendations(
    performance: float,
    security: float,
    compliance: float,
    overall: int,
    vulnerability_report: Optional[VulnerabilityReport] = None,
    compliance_report: Optional[ComplianceReport] = None,
) -> List[str]:
    """
    Threshold-triggered advice followed by the finding and failure
    recommendations, first occurrence order, without duplicates.
    """
    recommendations: List[str] = []
    if performance < PERFORMANCE_RECOMMENDATION_THRESHOLD:
        recommendations.extend(PERFORMANCE_ADVICE)
    if security < SECURITY_RECOMMENDATION_THRESHOLD:
        recommendations.extend(SECURITY_ADVICE)
    if compliance < COMPLIANCE_RECOMMENDATION_THRESHOLD:
        recommendations.extend(COMPLIANCE_ADVICE)
    if overall >= POSITIVE_ASSESSMENT_THRESHOLD:
        recommendations.extend(POSITIVE_ASSESSMENT)

    if vulnerability_report is not None:
        recommendations.extend(
            finding.recommendation for finding in vulnerability_report.findings
            if finding.recommendation
        )
    if compliance_report is not None:
        for failure in compliance_report.failures:
            recommendations.extend(failure.recommendations)

    return list(dict.fromkeys(recommendations))


def aggregate(
    run_id: str,
    target_address: str,
    timestamp: str,
    endpoint_metrics: Sequence[EndpointMetric],
    vulnerability_report: VulnerabilityReport,
    compliance_report: ComplianceReport,
    phase_status: Optional[Dict[str, str]] = None,
) -> CompositeReport:
    """Assemble the immutable CompositeReport of one run."""
    performance = performance_score(endpoint_metrics)
    security = int(clamp(vulnerability_report.security_score))
    compliance = int(clamp(compliance_report.score))
    overall = overall_score(performance, security, compliance)

    return CompositeReport(
        run_id=run_id,
        target_address=target_address,
        timestamp=timestamp,
        endpoint_metrics=tuple(endpoint_metrics),
        vulnerability_report=vulnerability_report,
        compliance_report=compliance_report,
        performance_score=round(performance, 2),
        security_score=security,
        compliance_score=compliance,
        overall_score=overall,
        readiness_tier=readiness_tier(overall),
        recommendations=tuple(build_recommendations(
            performance, security, compliance, overall,
            vulnerability_report, compliance_report,
        )),
        phase_status=dict(phase_status or {}),
    )
