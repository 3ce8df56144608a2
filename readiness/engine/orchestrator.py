"""
Assessment orchestrator.

Sequences one run through a fixed, linear phase machine:

    IDLE -> LOAD_TEST -> PENETRATION_TEST -> COMPLIANCE_TEST
         -> AGGREGATE -> PERSISTED -> DONE

Every phase executes through Outcome.capture. A phase that fails is
replaced by its zero-credit result and recorded in the report's
phase_status, so later phases and the final report still happen.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from readiness.compliance.evaluator import ComplianceEvaluator
from readiness.engine.aggregator import aggregate
from readiness.engine.battery import VulnerabilityBattery
from readiness.engine.load import LoadTestConfig, LoadTestEngine, failed_endpoint
from readiness.models.results import (
    ComplianceReport,
    CompositeReport,
    EndpointMetric,
    Outcome,
    StressReport,
    VulnerabilityReport,
)
from readiness.reporter.report import ReportWriter
from readiness.utils.http import ProbeClient
from readiness.utils.inspector import SourceTreeInspector
from readiness.utils.logger import get_logger
from readiness.config import (
    DEFAULT_ENDPOINTS,
    DEFAULT_CONCURRENCY,
    DEFAULT_REQUESTS_PER_USER,
    DEFAULT_RAMP_UP,
    DEFAULT_TEST_DURATION,
    STRESS_TIERS,
)

logger = get_logger(__name__)


class Phase(Enum):
    IDLE = 'idle'
    LOAD_TEST = 'load_test'
    PENETRATION_TEST = 'penetration_test'
    COMPLIANCE_TEST = 'compliance_test'
    AGGREGATE = 'aggregate'
    PERSISTED = 'persisted'
    DONE = 'done'


PHASE_SEQUENCE = tuple(Phase)


@dataclass
class RunRecord:
    """Bookkeeping for one run; the report itself is immutable."""
    run_id: str
    target_address: str
    started_at: str
    phase: Phase = Phase.IDLE
    artifact: Optional[Path] = None
    html_artifact: Optional[Path] = None
    persisted: bool = False
    persistence_error: Optional[str] = None
    phase_status: Dict[str, str] = field(default_factory=dict)


def new_run_id(now: Optional[datetime] = None) -> str:
    """Start-time derived id; the random suffix keeps same-instant runs apart."""
    now = now or datetime.now(timezone.utc)
    return f"{now.strftime('%Y%m%dT%H%M%S%fZ')}-{uuid.uuid4().hex[:8]}"


class Orchestrator:
    """
    Runs the full readiness suite against one target per call.

    Args:
        source_root: Root of the target's source tree for compliance controls
        writer: Report writer (default: ReportWriter() on REPORT_DIR)
        load_engine: Load test engine (default: LoadTestEngine())
        client_factory: Callable(base_url) returning a context-managed probe client
        endpoints: Endpoints exercised by the load phase
        concurrency: Virtual users per endpoint
        requests_per_user: Sequential requests per virtual user
        ramp_up: Seconds over which virtual users are started
        duration: Nominal window for requests/second (<= 0: measured)
        fail_closed: Count probe execution errors as findings
        write_html: Also render the HTML report next to the JSON artifact
        environ: Environment mapping for compliance env signals
    """

    def __init__(
        self,
        source_root: Union[str, Path] = '.',
        writer: Optional[ReportWriter] = None,
        load_engine: Optional[LoadTestEngine] = None,
        client_factory: Callable[[str], ProbeClient] = ProbeClient,
        endpoints: Optional[Sequence[str]] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        requests_per_user: int = DEFAULT_REQUESTS_PER_USER,
        ramp_up: float = DEFAULT_RAMP_UP,
        duration: float = DEFAULT_TEST_DURATION,
        fail_closed: Optional[bool] = None,
        write_html: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.source_root = Path(source_root)
        self.writer = writer or ReportWriter()
        self.client_factory = client_factory
        self.load_engine = load_engine or LoadTestEngine(client_factory=client_factory)
        self.endpoints = list(endpoints) if endpoints is not None else list(DEFAULT_ENDPOINTS)
        self.concurrency = concurrency
        self.requests_per_user = requests_per_user
        self.ramp_up = ramp_up
        self.duration = duration
        self.fail_closed = fail_closed
        self.write_html = write_html
        self.environ = environ

        # Bookkeeping of the most recent run only; past runs live on disk
        self.last_run: Optional[RunRecord] = None

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _advance(self, record: RunRecord, phase: Phase):
        current = PHASE_SEQUENCE.index(record.phase)
        if PHASE_SEQUENCE.index(phase) != current + 1:
            raise RuntimeError(f"Illegal phase transition {record.phase.name} -> {phase.name}")
        record.phase = phase
        logger.debug(f"[{record.run_id}] phase {phase.value}")

    def _load_phase(self, target: str) -> List[EndpointMetric]:
        config = LoadTestConfig(
            base_url=target,
            endpoints=list(self.endpoints),
            concurrency=self.concurrency,
            requests_per_user=self.requests_per_user,
            ramp_up=self.ramp_up,
            duration=self.duration,
        )
        return self.load_engine.run(config)

    def _penetration_phase(self, target: str) -> VulnerabilityReport:
        with self.client_factory(target) as client:
            return VulnerabilityBattery.for_client(client, fail_closed=self.fail_closed).run()

    def _compliance_phase(self) -> ComplianceReport:
        inspector = SourceTreeInspector(self.source_root, environ=self.environ)
        return ComplianceEvaluator(inspector).run()

    def _settle(self, record: RunRecord, name: str, outcome: Outcome, fallback):
        if outcome.ok:
            record.phase_status[name] = 'ok'
            return outcome.value
        logger.error(f"Phase {name} failed, substituting zero-credit result: {outcome.error}")
        record.phase_status[name] = f"failed: {outcome.error}"
        return fallback

    def _persist(self, record: RunRecord, report: CompositeReport):
        outcome = Outcome.capture(self.writer.write, report)
        if not outcome.ok:
            record.persistence_error = outcome.error
            logger.error(f"Could not persist report {record.run_id}: {outcome.error}")
            return

        record.artifact = outcome.value
        record.persisted = True
        if self.write_html:
            html = Outcome.capture(self.writer.write_html, report)
            if html.ok:
                record.html_artifact = html.value
            else:
                logger.error(f"Could not render HTML report {record.run_id}: {html.error}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def run_full_suite(self, target: str) -> CompositeReport:
        """Run load, penetration and compliance phases and return the merged report."""
        started = datetime.now(timezone.utc)
        record = RunRecord(
            run_id=new_run_id(started),
            target_address=target,
            started_at=started.isoformat(),
        )
        self.last_run = record
        logger.info(f"Starting readiness run {record.run_id} against {target}")

        self._advance(record, Phase.LOAD_TEST)
        metrics = self._settle(
            record, Phase.LOAD_TEST.value,
            Outcome.capture(self._load_phase, target),
            [failed_endpoint(endpoint) for endpoint in self.endpoints],
        )

        self._advance(record, Phase.PENETRATION_TEST)
        vulnerability_report = self._settle(
            record, Phase.PENETRATION_TEST.value,
            Outcome.capture(self._penetration_phase, target), VulnerabilityReport.zero_credit(),
        )

        self._advance(record, Phase.COMPLIANCE_TEST)
        compliance_report = self._settle(
            record, Phase.COMPLIANCE_TEST.value,
            Outcome.capture(self._compliance_phase), ComplianceReport.zero_credit(),
        )

        self._advance(record, Phase.AGGREGATE)
        report = aggregate(
            run_id=record.run_id,
            target_address=target,
            timestamp=record.started_at,
            endpoint_metrics=metrics,
            vulnerability_report=vulnerability_report,
            compliance_report=compliance_report,
            phase_status=record.phase_status,
        )

        self._advance(record, Phase.PERSISTED)
        self._persist(record, report)

        self._advance(record, Phase.DONE)
        logger.info(
            f"Run {record.run_id} complete: {report.overall_score}/100 ({report.readiness_tier})"
        )
        return report

    def run_stress_profile(
        self,
        target: str,
        tiers: Sequence[int] = STRESS_TIERS,
        endpoints: Optional[Sequence[str]] = None,
        **kwargs,
    ) -> StressReport:
        """Escalate concurrency tier by tier until the error breaker trips."""
        logger.info(f"Starting stress profile against {target}")
        return self.load_engine.run_stress_profile(
            target,
            endpoints=list(endpoints) if endpoints is not None else None,
            tiers=tiers,
            **kwargs,
        )
