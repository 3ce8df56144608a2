"""
Compliance control evaluator.

Runs every control of the rule table against a source-tree inspector, one
at a time, and aggregates the per-control results by framework, by
category and overall. A control that raises is recorded as a critical,
zero-score failure; the remaining controls are unaffected.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from readiness.compliance.rules import CONTROL_CATALOG, RULESET_VERSION, ControlDefinition
from readiness.models.results import (
    CategoryScore,
    ComplianceFailure,
    ComplianceReport,
    ControlResult,
    FrameworkScore,
    Outcome,
)
from readiness.utils.inspector import SourceTreeInspector
from readiness.utils.logger import get_logger
from readiness.utils.scoring import mean, percentage, round_half_up
from readiness.config import COMPLIANCE_FRAMEWORKS, COMPLIANCE_CATEGORIES, COMPLIANCE_RISK_TIERS

logger = get_logger(__name__)

GENERAL_RECOMMENDATIONS = (
    'Implement comprehensive security training program',
    'Regular security assessments and penetration testing',
    'Maintain up-to-date security documentation',
    'Establish incident response and business continuity plans',
    'Regular compliance audits and reviews',
    'Implement automated security monitoring and alerting',
)


def compliance_risk(score: float) -> str:
    for minimum, level in COMPLIANCE_RISK_TIERS:
        if score >= minimum:
            return level
    return COMPLIANCE_RISK_TIERS[-1][1]


def execution_failure(control: ControlDefinition, error: str) -> ControlResult:
    return ControlResult(
        control_id=control.id,
        passed=False,
        compliant=False,
        score=0,
        details=f"execution failed: {error}",
        recommendations=('Review test implementation and security controls',),
        risk_level='critical',
    )


def _framework_score(results: Sequence[ControlResult]) -> FrameworkScore:
    passed = sum(1 for result in results if result.compliant)
    return FrameworkScore(
        score=round_half_up(mean(result.score for result in results)),
        compliance=percentage(passed, len(results)),
        passed_tests=passed,
        total_tests=len(results),
        critical_issues=sum(
            1 for result in results if not result.compliant and result.risk_level == 'critical'
        ),
    )


def build_compliance_report(
    evaluated: Sequence[Tuple[ControlDefinition, ControlResult]],
) -> ComplianceReport:
    """Aggregate (definition, result) pairs into the compliance report."""
    results = [result for _, result in evaluated]
    passed = sum(1 for result in results if result.compliant)
    score = round_half_up(mean(result.score for result in results))

    frameworks: Dict[str, FrameworkScore] = {}
    for framework in COMPLIANCE_FRAMEWORKS:
        members = [result for control, result in evaluated if control.framework == framework]
        frameworks[framework] = _framework_score(members)

    categories: Dict[str, CategoryScore] = {}
    for category in COMPLIANCE_CATEGORIES:
        members = [result for control, result in evaluated if control.category == category]
        categories[category] = CategoryScore(
            score=round_half_up(mean(result.score for result in members)),
            passed_tests=sum(1 for result in members if result.compliant),
            total_tests=len(members),
        )

    failures = tuple(
        ComplianceFailure(
            test=control.name,
            control_id=control.id,
            category=control.category,
            framework=control.framework,
            risk=result.risk_level,
            details=result.details,
            recommendations=result.recommendations,
        )
        for control, result in evaluated
        if not result.compliant
    )

    return ComplianceReport(
        score=score,
        compliance=percentage(passed, len(results)),
        risk_level=compliance_risk(score),
        passed_tests=passed,
        total_tests=len(results),
        frameworks=frameworks,
        categories=categories,
        failures=failures,
        results=tuple(results),
        recommendations=GENERAL_RECOMMENDATIONS,
        ruleset_version=RULESET_VERSION,
    )


class ComplianceEvaluator:
    """
    Sequential control runner.

    Args:
        inspector: Read-only view of the target's source tree and environment
        controls: Control definitions to evaluate (default: the full rule table)
    """

    def __init__(
        self,
        inspector: SourceTreeInspector,
        controls: Optional[Sequence[ControlDefinition]] = None,
    ):
        self.inspector = inspector
        self.controls = tuple(CONTROL_CATALOG if controls is None else controls)

    def evaluate_control(self, control: ControlDefinition) -> ControlResult:
        outcome = Outcome.capture(control.run, self.inspector)
        if not outcome.ok:
            logger.error(f"Control {control.id} failed to execute: {outcome.error}")
            return execution_failure(control, outcome.error)
        return outcome.value

    def run(self) -> ComplianceReport:
        logger.info(f"Evaluating {len(self.controls)} compliance controls (ruleset {RULESET_VERSION})")
        evaluated: List[Tuple[ControlDefinition, ControlResult]] = []

        for control in self.controls:
            result = self.evaluate_control(control)
            evaluated.append((control, result))
            if result.compliant:
                logger.debug(f"{control.id} {control.name}: compliant ({result.score}/100)")
            else:
                logger.warning(
                    f"{control.id} {control.name}: NON-COMPLIANT [{control.framework}] "
                    f"({result.score}/100, risk {result.risk_level})"
                )

        report = build_compliance_report(evaluated)
        logger.info(
            f"Compliance evaluation complete. Score {report.score}/100, "
            f"{report.passed_tests}/{report.total_tests} controls compliant, risk {report.risk_level}"
        )
        return report
