"""
Configuration probes: exposed files, missing headers, path traversal.
"""

from readiness.probes.base import BaseProbe
from readiness.models.results import ProbeResult
from readiness.config import (
    SENSITIVE_PATHS,
    REQUIRED_SECURITY_HEADERS,
    TRAVERSAL_PAYLOADS,
    TRAVERSAL_MARKERS,
)

FILES_PATH = '/api/files/'


class InformationDisclosureProbe(BaseProbe):
    """Requests well-known sensitive paths."""

    name = "Information Disclosure"
    category = "configuration"
    severity = "medium"
    description = "Tests for sensitive information disclosure"
    recommendation = "Restrict access to sensitive files and directories"

    def check(self) -> ProbeResult:
        disclosed = []
        for path in SENSITIVE_PATHS:
            response = self._send('GET', path)
            if response.status == 200:
                disclosed.append(path)

        evidence = {'disclosedEndpoints': disclosed}
        if disclosed:
            return self._vulnerable(
                f"Sensitive information disclosed: {', '.join(disclosed)}",
                evidence=evidence,
            )
        return self._secure("No information disclosure detected", evidence=evidence)


class SecurityHeadersProbe(BaseProbe):
    """Checks the root response for the expected security headers."""

    name = "Security Headers"
    category = "configuration"
    severity = "low"
    description = "Tests for proper security headers implementation"
    recommendation = "Implement missing security headers for defense in depth"

    def check(self) -> ProbeResult:
        response = self._send('GET', '/')
        missing = [header for header in REQUIRED_SECURITY_HEADERS if not response.header(header)]

        evidence = {'presentHeaders': sorted(response.headers), 'missingHeaders': missing}
        if missing:
            return self._vulnerable(
                f"Missing security headers: {', '.join(missing)}",
                evidence=evidence,
            )
        return self._secure("All security headers present", evidence=evidence)


class DirectoryTraversalProbe(BaseProbe):
    """Requests traversal payloads and looks for system file contents."""

    name = "Directory Traversal"
    category = "configuration"
    severity = "high"
    description = "Tests for directory traversal vulnerabilities"
    recommendation = "Implement proper input validation and path sanitization"

    def check(self) -> ProbeResult:
        for payload in TRAVERSAL_PAYLOADS:
            response = self._send('GET', FILES_PATH + payload)
            marker = next((m for m in TRAVERSAL_MARKERS if m in response.body), None)
            if marker:
                return self._vulnerable(
                    "Directory traversal vulnerability detected",
                    evidence={'payload': payload, 'marker': marker},
                )
        return self._secure("No directory traversal vulnerability")
