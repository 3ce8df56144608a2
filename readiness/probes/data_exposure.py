"""
Data exposure probes: oversharing API responses and verbose error pages.
"""

from readiness.probes.base import BaseProbe
from readiness.models.results import ProbeResult
from readiness.config import SENSITIVE_DATA_PATTERNS, ERROR_LEAK_PATTERNS

USERS_PATH = '/api/users'
MISSING_PATH = '/api/nonexistent/endpoint/12345'


class ApiDataLeakageProbe(BaseProbe):
    """Lists users and looks for sensitive field names in the payload."""

    name = "API Data Leakage"
    category = "data_exposure"
    severity = "medium"
    description = "Tests for excessive data exposure in API responses"
    recommendation = "Filter sensitive fields from API responses and implement data minimization"

    def check(self) -> ProbeResult:
        response = self._send('GET', USERS_PATH)
        if not response.succeeded:
            return self._secure(f"User listing refused (HTTP {response.status})")

        matched = self._first_match(SENSITIVE_DATA_PATTERNS, response.body)
        if matched:
            return self._vulnerable(
                "Sensitive data exposed in API responses",
                evidence={'pattern': matched},
            )
        return self._secure("No sensitive data leakage detected")


class ErrorMessageLeakageProbe(BaseProbe):
    """Triggers a not-found error and inspects the error body."""

    name = "Error Message Information Leakage"
    category = "data_exposure"
    severity = "low"
    description = "Tests for sensitive information in error messages"
    recommendation = "Implement generic error messages and proper error handling"

    def check(self) -> ProbeResult:
        response = self._send('GET', MISSING_PATH)

        matched = self._first_match(ERROR_LEAK_PATTERNS, response.body)
        if matched:
            return self._vulnerable(
                "Error messages leak sensitive information",
                evidence={'pattern': matched, 'errorResponse': response.body[:500]},
            )
        return self._secure("Error messages properly sanitized")
