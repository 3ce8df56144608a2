"""
Data models for the readiness assessment.
"""

from readiness.models.results import (
    ReadinessError,
    Outcome,
    ProbeDefinition,
    ProbeResult,
    Finding,
    VulnerabilityReport,
    ControlResult,
    ComplianceFailure,
    FrameworkScore,
    CategoryScore,
    ComplianceReport,
    ResourceDelta,
    EndpointMetric,
    StressTier,
    StressReport,
    CompositeReport,
)

__all__ = [
    'ReadinessError', 'Outcome', 'ProbeDefinition', 'ProbeResult', 'Finding', 'VulnerabilityReport',
    'ControlResult', 'ComplianceFailure', 'FrameworkScore', 'CategoryScore',
    'ComplianceReport', 'ResourceDelta', 'EndpointMetric', 'StressTier',
    'StressReport', 'CompositeReport',
]
