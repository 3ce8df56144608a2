"""
Report persistence and rendering.
"""

from readiness.reporter.report import ReportWriter, print_console_report, print_stress_report

__all__ = ['ReportWriter', 'print_console_report', 'print_stress_report']
