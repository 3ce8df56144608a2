"""
Injection probes: SQL injection and cross-site scripting.

Detection is signal based: a database error fingerprint in the response,
or a script payload echoed back without output encoding.
"""

from typing import Any, Dict

from readiness.probes.base import BaseProbe
from readiness.models.results import ProbeResult
from readiness.config import (
    SQLI_ERROR_PATTERNS,
    XSS_REFLECTION_MARKERS,
    XSS_ENCODED_MARKERS,
)


class SqlInjectionProbe(BaseProbe):
    """Posts an injection payload and looks for database error fingerprints."""

    name = "SQL Injection"
    category = "injection"
    severity = "critical"
    description = "Tests for SQL injection vulnerabilities"
    recommendation = "Implement proper parameterized queries and input validation"

    def __init__(self, client, endpoint: str, payload: Dict[str, Any], **kwargs):
        super().__init__(client, **kwargs)
        self.endpoint = endpoint
        self.payload = payload

    def check(self) -> ProbeResult:
        response = self._send('POST', self.endpoint, body=self.payload)

        matched = self._first_match(SQLI_ERROR_PATTERNS, response.body)
        server_error = response.status >= 500 and 'error' in response.body.lower()

        if matched or server_error:
            return self._vulnerable(
                "SQL error patterns detected in response" if matched
                else f"Server error (HTTP {response.status}) triggered by injection payload",
                evidence={'status': response.status, 'pattern': matched, 'response': response.body[:500]},
            )
        return self._secure("No SQL injection detected")


class ReflectedXssProbe(BaseProbe):
    """Requests a URL carrying a script payload and checks for an unencoded echo."""

    name = "Reflected XSS"
    category = "injection"
    severity = "high"
    description = "Tests for reflected XSS in request parameters"
    recommendation = "Implement proper output encoding and Content Security Policy"

    def __init__(self, client, path: str, **kwargs):
        super().__init__(client, **kwargs)
        self.path = path

    def check(self) -> ProbeResult:
        response = self._send('GET', self.path)

        reflected = any(marker in response.body for marker in XSS_REFLECTION_MARKERS)
        encoded = any(marker in response.body for marker in XSS_ENCODED_MARKERS)

        if reflected and not encoded:
            return self._vulnerable(
                "Unencoded script tags found in response",
                evidence={'responseSnippet': response.body[:500]},
            )
        return self._secure("No XSS vulnerability detected")


class StoredXssProbe(BaseProbe):
    """Stores a script payload, reads the resource back and checks the echo."""

    name = "Stored XSS"
    category = "injection"
    severity = "high"
    description = "Tests for stored XSS in user-generated content"
    recommendation = "Implement input validation and output encoding for user-generated content"

    def __init__(self, client, endpoint: str, field_name: str, payload: str, **kwargs):
        super().__init__(client, **kwargs)
        self.endpoint = endpoint
        self.field_name = field_name
        self.payload = payload

    def check(self) -> ProbeResult:
        self._send('POST', self.endpoint, body={self.field_name: self.payload})
        response = self._send('GET', self.endpoint)

        stored = self.payload in response.body and '&lt;img' not in response.body
        if stored:
            return self._vulnerable(
                "Stored XSS payload returned without encoding",
                evidence={'storedPayload': self.payload, 'response': response.body[:500]},
            )
        return self._secure("No stored XSS vulnerability detected")
