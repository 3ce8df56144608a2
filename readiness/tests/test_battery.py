"""
Tests for the probe battery: scoring, counts and failure policy.
"""

import unittest

from readiness.engine.battery import (
    GENERAL_RECOMMENDATIONS,
    VulnerabilityBattery,
    security_score,
    security_tier,
)
from readiness.models.results import ProbeResult
from readiness.probes import BaseProbe
from readiness.tests.fakes import FakeTarget, respond


class StubProbe(BaseProbe):
    """Probe with a scripted outcome: 'vulnerable', 'secure' or 'raise'."""

    category = "injection"

    def __init__(self, name, severity, outcome):
        self.severity = severity
        self.outcome = outcome
        super().__init__(client=None, name=name, description='scripted')

    def check(self) -> ProbeResult:
        if self.outcome == 'raise':
            raise RuntimeError("scripted failure")
        if self.outcome == 'vulnerable':
            return self._vulnerable(f"{self.definition.name} found")
        return self._secure("clean")


class TestSecurityScore(unittest.TestCase):
    def test_no_findings(self):
        self.assertEqual(security_score([]), 100)

    def test_critical_plus_medium(self):
        self.assertEqual(security_score(['critical', 'medium']), 67)

    def test_every_weight(self):
        self.assertEqual(security_score(['critical']), 75)
        self.assertEqual(security_score(['high']), 85)
        self.assertEqual(security_score(['medium']), 92)
        self.assertEqual(security_score(['low']), 97)
        self.assertEqual(security_score(['info']), 100)

    def test_clamped_at_zero(self):
        self.assertEqual(security_score(['critical'] * 5), 0)

    def test_tiers(self):
        self.assertEqual(security_tier(100), 'excellent')
        self.assertEqual(security_tier(90), 'excellent')
        self.assertEqual(security_tier(89), 'good')
        self.assertEqual(security_tier(60), 'fair')
        self.assertEqual(security_tier(59), 'poor')


class TestVulnerabilityBattery(unittest.TestCase):
    def test_findings_and_counts(self):
        battery = VulnerabilityBattery([
            StubProbe('A', 'critical', 'vulnerable'),
            StubProbe('B', 'low', 'secure'),
            StubProbe('C', 'medium', 'vulnerable'),
        ])
        report = battery.run()

        self.assertEqual(report.total_tests, 3)
        self.assertEqual(report.security_score, 67)
        self.assertEqual(report.tier, 'fair')
        self.assertEqual([f.test for f in report.findings], ['A', 'C'])
        self.assertEqual(report.severity_counts['critical'], 1)
        self.assertEqual(report.severity_counts['medium'], 1)
        self.assertEqual(report.severity_counts['low'], 0)
        self.assertEqual(report.critical_count, 1)
        self.assertEqual(len(report.results), 3)
        self.assertEqual(report.execution_failures, 0)

    def test_findings_carry_definition(self):
        report = VulnerabilityBattery([StubProbe('A', 'high', 'vulnerable')]).run()
        finding = report.findings[0]
        self.assertEqual(finding.category, 'injection')
        self.assertEqual(finding.severity, 'high')
        self.assertEqual(finding.description, 'scripted')
        self.assertTrue(finding.recommendation)

    def test_throwing_probes_fail_open(self):
        probes = [StubProbe(f"P{i}", 'critical', 'raise') for i in range(4)]
        report = VulnerabilityBattery(probes, fail_closed=False).run()
        self.assertEqual(report.security_score, 100)
        self.assertEqual(report.vulnerabilities_found, 0)
        self.assertEqual(report.execution_failures, 4)

    def test_throwing_probes_fail_closed(self):
        probes = [StubProbe('P1', 'critical', 'raise'), StubProbe('P2', 'low', 'secure')]
        report = VulnerabilityBattery(probes, fail_closed=True).run()
        self.assertEqual(report.vulnerabilities_found, 1)
        self.assertEqual(report.security_score, 75)

    def test_one_failure_does_not_hide_others(self):
        report = VulnerabilityBattery([
            StubProbe('A', 'high', 'raise'),
            StubProbe('B', 'high', 'vulnerable'),
        ]).run()
        self.assertEqual([f.test for f in report.findings], ['B'])
        self.assertFalse(report.results[0].passed)

    def test_full_catalog_against_hardened_target(self):
        report = VulnerabilityBattery.for_client(FakeTarget()).run()
        self.assertEqual(report.total_tests, 17)
        self.assertEqual(report.security_score, 100)
        self.assertEqual(report.tier, 'excellent')
        self.assertEqual(report.recommendations, GENERAL_RECOMMENDATIONS)

    def test_full_catalog_with_open_admin(self):
        target = FakeTarget(overrides={('GET', '/api/admin/users'): respond(200, '[]')})
        report = VulnerabilityBattery.for_client(target).run()
        self.assertEqual(report.security_score, 75)
        self.assertEqual(report.findings[0].test, 'Privilege Escalation')


if __name__ == '__main__':
    unittest.main(verbosity=2)
