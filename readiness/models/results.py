"""
Standardized result models for the readiness assessment.

Central data structures shared by the load engine, the probe battery, the
compliance evaluator and the report aggregator. Definitions are built once
at startup; results, metrics and the composite report are immutable once
created.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

from readiness.config import PROBE_CATEGORIES, SEVERITY_ORDER

T = TypeVar('T')


class ReadinessError(Exception):
    """Base class for errors raised by the assessment engine."""


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """
    Either a value or the error that prevented computing it.

    Phase and check boundaries return an Outcome instead of letting
    exceptions travel upward; callers branch on ``ok``.
    """
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> 'Outcome[T]':
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> 'Outcome[T]':
        return cls(error=error or 'unknown error')

    @classmethod
    def capture(cls, fn: Callable[..., T], *args, **kwargs) -> 'Outcome[T]':
        """Run *fn* and wrap its return value or the exception it raised."""
        try:
            return cls.success(fn(*args, **kwargs))
        except Exception as e:
            return cls.failure(f"{type(e).__name__}: {e}")


# ----------------------------------------------------------------------
# Vulnerability probes
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ProbeDefinition:
    """Static description of one named security probe."""
    name: str
    category: str       # injection, authentication, authorization, crypto, configuration, data_exposure
    severity: str       # critical, high, medium, low, info
    description: str

    def __post_init__(self):
        if self.category not in PROBE_CATEGORIES:
            raise ValueError(f"Unknown probe category: {self.category}")
        if self.severity not in SEVERITY_ORDER:
            raise ValueError(f"Unknown severity: {self.severity}")


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of one probe execution.

    passed means the probe executed; vulnerable means a finding was confirmed.
    """
    passed: bool
    vulnerable: bool
    details: str
    evidence: Optional[Dict[str, Any]] = None
    recommendation: Optional[str] = None
    definition: Optional[ProbeDefinition] = None


@dataclass(frozen=True)
class Finding:
    """A vulnerable ProbeResult enriched with its definition."""
    test: str
    category: str
    severity: str
    description: str
    details: str
    evidence: Optional[Dict[str, Any]] = None
    recommendation: str = ""


@dataclass(frozen=True)
class VulnerabilityReport:
    """Aggregated output of the probe battery."""
    total_tests: int
    findings: Tuple[Finding, ...]
    severity_counts: Dict[str, int]
    security_score: int
    tier: str
    results: Tuple[ProbeResult, ...] = ()
    recommendations: Tuple[str, ...] = ()
    execution_failures: int = 0

    @property
    def vulnerabilities_found(self) -> int:
        return len(self.findings)

    @property
    def critical_count(self) -> int:
        return self.severity_counts.get('critical', 0)

    @classmethod
    def zero_credit(cls) -> 'VulnerabilityReport':
        """Neutral stand-in used when the whole phase failed."""
        return cls(
            total_tests=0,
            findings=(),
            severity_counts={severity: 0 for severity in SEVERITY_ORDER},
            security_score=0,
            tier='poor',
        )


# ----------------------------------------------------------------------
# Compliance controls
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ControlResult:
    """Outcome of one compliance control evaluation."""
    control_id: str
    passed: bool
    compliant: bool
    score: int                      # 0-100
    details: str
    recommendations: Tuple[str, ...] = ()
    risk_level: str = 'low'         # low, medium, high, critical
    evidence: Dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class ComplianceFailure:
    """A non-compliant ControlResult enriched with its definition."""
    test: str
    control_id: str
    category: str
    framework: str
    risk: str
    details: str
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FrameworkScore:
    score: int
    compliance: int
    passed_tests: int
    total_tests: int
    critical_issues: int = 0


@dataclass(frozen=True)
class CategoryScore:
    score: int
    passed_tests: int
    total_tests: int


@dataclass(frozen=True)
class ComplianceReport:
    """Aggregated output of the compliance evaluator."""
    score: int
    compliance: int
    risk_level: str
    passed_tests: int
    total_tests: int
    frameworks: Dict[str, FrameworkScore] = field(default_factory=dict)
    categories: Dict[str, CategoryScore] = field(default_factory=dict)
    failures: Tuple[ComplianceFailure, ...] = ()
    results: Tuple[ControlResult, ...] = ()
    recommendations: Tuple[str, ...] = ()
    ruleset_version: str = ""

    @classmethod
    def zero_credit(cls) -> 'ComplianceReport':
        """Neutral stand-in used when the whole phase failed."""
        return cls(score=0, compliance=0, risk_level='critical', passed_tests=0, total_tests=0)


# ----------------------------------------------------------------------
# Load testing
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class ResourceDelta:
    """Best-effort process resource change over one endpoint's window."""
    memory_kb: int = 0          # peak RSS growth
    cpu_seconds: float = 0.0    # user + system CPU time consumed


@dataclass(frozen=True)
class EndpointMetric:
    """Load statistics for one endpoint in one run. Latencies are in ms."""
    endpoint: str
    total_requests: int
    success_count: int
    fail_count: int
    avg_latency: float
    min_latency: float
    max_latency: float
    requests_per_second: float
    error_rate: float
    resource_delta: ResourceDelta = field(default_factory=ResourceDelta)


@dataclass(frozen=True)
class StressTier:
    """One concurrency level of the stress profile."""
    concurrency: int
    avg_latency: float
    error_rate: float
    degraded: bool
    metrics: Tuple[EndpointMetric, ...] = ()


@dataclass(frozen=True)
class StressReport:
    tiers: Tuple[StressTier, ...]
    breaking_point: Optional[int] = None    # concurrency at which the breaker tripped


# ----------------------------------------------------------------------
# Composite
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class CompositeReport:
    """
    Final merged assessment of one run.

    Assembled once after every phase has settled and never mutated.
    """
    run_id: str
    target_address: str
    timestamp: str
    endpoint_metrics: Tuple[EndpointMetric, ...]
    vulnerability_report: VulnerabilityReport
    compliance_report: ComplianceReport
    performance_score: float
    security_score: int
    compliance_score: int
    overall_score: int
    readiness_tier: str
    recommendations: Tuple[str, ...]
    phase_status: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
