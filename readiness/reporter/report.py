"""
Report persistence and rendering for readiness assessments.

Supports multiple output formats:
- JSON artifact, one per run, written with exclusive create so runs never
  overwrite one another
- HTML report via Jinja2 next to the JSON artifact
- Console summary with per-phase sections
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from readiness.models.results import CompositeReport, StressReport
from readiness.utils.logger import get_logger
from readiness.config import TEMPLATE_DIR, REPORT_DIR, REPORT_PREFIX, SEVERITY_ORDER

logger = get_logger(__name__)


class ReportWriter:
    """
    Writes CompositeReports to an append-only report directory.

    Args:
        output_dir: Directory holding the artifacts (default REPORT_DIR)
    """

    def __init__(self, output_dir: Optional[Union[str, Path]] = None):
        self.output_dir = Path(output_dir) if output_dir is not None else REPORT_DIR
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(['html', 'xml'])
        )

    def artifact_path(self, run_id: str, suffix: str = '.json') -> Path:
        return self.output_dir / f"{REPORT_PREFIX}_{run_id}{suffix}"

    def _write_new(self, path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        # 'x' raises FileExistsError instead of replacing an earlier run
        with open(path, 'x', encoding='utf-8') as fh:
            fh.write(content)
        return path

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------
    def write(self, report: CompositeReport) -> Path:
        """Persist *report* as its run's JSON artifact and return the path."""
        path = self._write_new(
            self.artifact_path(report.run_id),
            json.dumps(report.to_dict(), indent=2, default=str),
        )
        logger.info(f"JSON report saved to: {path}")
        return path

    def load(self, path: Union[str, Path]) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as fh:
            return json.load(fh)

    def history(self) -> List[Path]:
        """Persisted JSON artifacts, oldest run first."""
        if not self.output_dir.is_dir():
            return []
        return sorted(self.output_dir.glob(f"{REPORT_PREFIX}_*.json"))

    # ------------------------------------------------------------------
    # HTML
    # ------------------------------------------------------------------
    def render_html(self, report: CompositeReport) -> str:
        findings = sorted(
            report.vulnerability_report.findings,
            key=lambda f: SEVERITY_ORDER.index(f.severity),
        )
        template = self.jinja_env.get_template('report.html')
        return template.render(
            report=report,
            findings=findings,
            severity_order=SEVERITY_ORDER,
        )

    def write_html(self, report: CompositeReport) -> Path:
        logger.info("Generating HTML report...")
        try:
            html_content = self.render_html(report)
        except Exception as e:
            logger.error(f"Failed to render HTML template: {e}")
            raise

        path = self._write_new(self.artifact_path(report.run_id, '.html'), html_content)
        logger.info(f"HTML report saved to: {path}")
        return path


# ----------------------------------------------------------------------
# Console
# ----------------------------------------------------------------------
def print_console_report(report: CompositeReport):
    sep = "=" * 72
    rule = "-" * 72
    vulns = report.vulnerability_report
    compliance = report.compliance_report

    print(f"\n{sep}")
    print("  ENTERPRISE READINESS REPORT")
    print(sep)
    print(f"  Target : {report.target_address}")
    print(f"  Run    : {report.run_id}")
    print(f"  Date   : {report.timestamp}")
    print(sep)

    print(f"\n  Readiness        : {report.readiness_tier}")
    print(f"  Overall Score    : {report.overall_score}/100")
    print(f"  Performance Score: {report.performance_score:.1f}/100")
    print(f"  Security Score   : {report.security_score}/100")
    print(f"  Compliance Score : {report.compliance_score}/100")

    failed_phases = {phase: status for phase, status in report.phase_status.items() if status != 'ok'}
    if failed_phases:
        print("\n  Phase Failures:")
        for phase, status in failed_phases.items():
            print(f"    {phase:20s} : {status}")

    if report.endpoint_metrics:
        print(f"\n{rule}")
        print("  LOAD TEST")
        print(rule)
        for metric in report.endpoint_metrics:
            print(
                f"  {metric.endpoint:30s} {metric.total_requests:6d} req  "
                f"{metric.avg_latency:8.1f} ms avg  {metric.requests_per_second:7.1f} req/s  "
                f"{metric.error_rate:5.1f}% errors"
            )

    print(f"\n{rule}")
    print("  PENETRATION TEST")
    print(rule)
    print(f"  Tests run   : {vulns.total_tests}")
    print(f"  Findings    : {vulns.vulnerabilities_found}")
    for severity in SEVERITY_ORDER:
        count = vulns.severity_counts.get(severity, 0)
        if count:
            print(f"    {severity.upper():10s} : {count}")
    for i, finding in enumerate(vulns.findings, 1):
        print(f"\n  {i}. [{finding.severity.upper()}] {finding.test}")
        print(f"     Category: {finding.category}")
        print(f"     Details : {finding.details}")
        print(f"     Fix     : {finding.recommendation}")

    print(f"\n{rule}")
    print("  COMPLIANCE")
    print(rule)
    print(f"  Compliance Rate: {compliance.compliance}%")
    print(f"  Risk Level     : {compliance.risk_level.upper()}")
    print(f"  Controls Passed: {compliance.passed_tests}/{compliance.total_tests}")
    for framework, metrics in compliance.frameworks.items():
        if metrics.total_tests:
            critical = f"  ({metrics.critical_issues} critical)" if metrics.critical_issues else ""
            print(f"    {framework:10s} : {metrics.compliance}% ({metrics.passed_tests}/{metrics.total_tests}){critical}")

    if report.recommendations:
        print(f"\n{rule}")
        print("  RECOMMENDATIONS")
        print(rule)
        for i, recommendation in enumerate(report.recommendations, 1):
            print(f"  {i}. {recommendation}")

    print(f"\n{sep}")


def print_stress_report(target: str, stress: StressReport):
    sep = "=" * 72

    print(f"\n{sep}")
    print("  STRESS PROFILE")
    print(sep)
    print(f"  Target : {target}")
    print(sep)
    for tier in stress.tiers:
        flag = "  DEGRADED" if tier.degraded else ""
        print(
            f"  {tier.concurrency:5d} users  {tier.avg_latency:9.1f} ms avg  "
            f"{tier.error_rate:5.1f}% errors{flag}"
        )
    if stress.breaking_point is not None:
        print(f"\n  Breaking point: {stress.breaking_point} concurrent users")
    else:
        print("\n  No breaking point reached")
    print(f"\n{sep}")
