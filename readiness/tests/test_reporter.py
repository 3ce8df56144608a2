"""
Tests for report persistence and rendering.
"""

import io
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path

from readiness.engine.aggregator import aggregate
from readiness.models.results import (
    ComplianceReport,
    EndpointMetric,
    Finding,
    StressReport,
    StressTier,
    VulnerabilityReport,
)
from readiness.reporter import ReportWriter, print_console_report, print_stress_report


def sample_report(run_id='20260101T000000000000Z-abcdef01', phase_status=None):
    metric = EndpointMetric(
        endpoint='/api/transactions',
        total_requests=20,
        success_count=19,
        fail_count=1,
        avg_latency=42.0,
        min_latency=10.0,
        max_latency=90.0,
        requests_per_second=5.0,
        error_rate=5.0,
    )
    finding = Finding(
        test='Reflected XSS',
        category='injection',
        severity='high',
        description='Script reflected unencoded',
        details='<script>alert("xss")</script> reflected',
        recommendation='Encode output',
    )
    vulnerabilities = VulnerabilityReport(
        total_tests=17,
        findings=(finding,),
        severity_counts={'critical': 0, 'high': 1, 'medium': 0, 'low': 0, 'info': 0},
        security_score=85,
        tier='good',
    )
    compliance = ComplianceReport(score=80, compliance=75, risk_level='medium',
                                  passed_tests=12, total_tests=16)
    return aggregate(run_id, 'https://t.test', '2026-01-01T00:00:00+00:00', [metric],
                     vulnerabilities, compliance,
                     phase_status=phase_status or {'load_test': 'ok'})


class TestReportWriter(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.writer = ReportWriter(Path(self._tmp.name) / 'reports')

    def tearDown(self):
        self._tmp.cleanup()

    def test_write_and_load(self):
        report = sample_report()
        path = self.writer.write(report)

        self.assertTrue(path.name.startswith('readiness_report_'))
        self.assertIn(report.run_id, path.name)
        data = self.writer.load(path)
        self.assertEqual(data['run_id'], report.run_id)
        self.assertEqual(data['overall_score'], report.overall_score)
        self.assertEqual(data['readiness_tier'], report.readiness_tier)
        self.assertEqual(data['vulnerability_report']['findings'][0]['test'], 'Reflected XSS')
        self.assertEqual(data['phase_status'], {'load_test': 'ok'})

    def test_existing_artifact_never_overwritten(self):
        report = sample_report()
        path = self.writer.write(report)
        before = path.read_text(encoding='utf-8')
        with self.assertRaises(FileExistsError):
            self.writer.write(report)
        self.assertEqual(path.read_text(encoding='utf-8'), before)

    def test_history_oldest_first(self):
        self.assertEqual(self.writer.history(), [])
        self.writer.write(sample_report('20260102T000000000000Z-00000002'))
        self.writer.write(sample_report('20260101T000000000000Z-00000001'))
        names = [path.name for path in self.writer.history()]
        self.assertEqual(names, [
            'readiness_report_20260101T000000000000Z-00000001.json',
            'readiness_report_20260102T000000000000Z-00000002.json',
        ])

    def test_html_escapes_target_content(self):
        html = self.writer.render_html(sample_report())
        self.assertIn('Enterprise Readiness Report', html)
        self.assertIn('/api/transactions', html)
        self.assertIn('Reflected XSS', html)
        self.assertNotIn('<script>alert', html)
        self.assertIn('&lt;script&gt;', html)

    def test_html_lists_failed_phases(self):
        report = sample_report(phase_status={'load_test': 'failed: RuntimeError: boom'})
        self.assertIn('failed: RuntimeError: boom', self.writer.render_html(report))

    def test_write_html(self):
        path = self.writer.write_html(sample_report())
        self.assertEqual(path.suffix, '.html')
        self.assertTrue(path.exists())
        self.assertEqual(self.writer.history(), [])


class TestConsoleOutput(unittest.TestCase):
    def test_console_report(self):
        report = sample_report(phase_status={'load_test': 'ok', 'compliance_test': 'failed: x'})
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_console_report(report)
        output = buffer.getvalue()

        self.assertIn('ENTERPRISE READINESS REPORT', output)
        self.assertIn(report.readiness_tier, output)
        self.assertIn(f"{report.overall_score}/100", output)
        self.assertIn('[HIGH] Reflected XSS', output)
        self.assertIn('compliance_test', output)
        self.assertIn('RECOMMENDATIONS', output)

    def test_stress_report(self):
        stress = StressReport(
            tiers=(
                StressTier(concurrency=10, avg_latency=20.0, error_rate=0.0, degraded=False),
                StressTier(concurrency=50, avg_latency=6000.0, error_rate=40.0, degraded=True),
            ),
            breaking_point=50,
        )
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_stress_report('https://t.test', stress)
        output = buffer.getvalue()
        self.assertIn('DEGRADED', output)
        self.assertIn('Breaking point: 50 concurrent users', output)

    def test_stress_report_without_breaking_point(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_stress_report('https://t.test', StressReport(tiers=()))
        self.assertIn('No breaking point reached', buffer.getvalue())


if __name__ == '__main__':
    unittest.main(verbosity=2)
