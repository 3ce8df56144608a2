"""
Compliance control catalog and evaluator.
"""

from readiness.compliance.rules import (
    CONTROL_CATALOG,
    CONTROL_REGISTRY,
    RULESET_VERSION,
    ControlDefinition,
    Signal,
    rule_table,
)
from readiness.compliance.evaluator import ComplianceEvaluator

__all__ = [
    'CONTROL_CATALOG',
    'CONTROL_REGISTRY',
    'RULESET_VERSION',
    'ControlDefinition',
    'Signal',
    'rule_table',
    'ComplianceEvaluator',
]
