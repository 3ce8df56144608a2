"""
Authorization probes: object references, privileged endpoints, forged tokens.

All three look for the same signal: a 200 where an unauthenticated or
forged request should have been refused.
"""

from readiness.probes.base import BaseProbe
from readiness.models.results import ProbeResult
from readiness.config import (
    IDOR_USER_IDS,
    ADMIN_ENDPOINTS,
    JWT_NONE_TOKEN,
    JWT_WEAK_SECRET_TOKEN,
)

AUTH_USER_PATH = '/api/auth/user'


class IdorProbe(BaseProbe):
    """Requests other users' records without credentials."""

    name = "Insecure Direct Object Reference"
    category = "authorization"
    severity = "high"
    description = "Tests for unauthorized access to user data"
    recommendation = "Implement proper authorization checks for all resource access"

    def check(self) -> ProbeResult:
        for user_id in IDOR_USER_IDS:
            path = f"/api/users/{user_id}"
            response = self._send('GET', path)
            if response.status == 200 and 'email' in response.body:
                return self._vulnerable(
                    "Unauthorized access to user data possible",
                    evidence={'path': path, 'status': response.status},
                )
        return self._secure("Proper authorization controls in place")


class PrivilegeEscalationProbe(BaseProbe):
    """Requests admin endpoints without admin privileges."""

    name = "Privilege Escalation"
    category = "authorization"
    severity = "critical"
    description = "Tests for vertical privilege escalation"
    recommendation = "Implement role-based access control and principle of least privilege"

    def check(self) -> ProbeResult:
        exposed = []
        for endpoint in ADMIN_ENDPOINTS:
            response = self._send('GET', endpoint)
            if response.status == 200:
                exposed.append(endpoint)
                break

        if exposed:
            return self._vulnerable(
                "Access to privileged endpoints possible",
                evidence={'endpoints': exposed},
            )
        return self._secure("Proper privilege controls enforced")


class JwtValidationProbe(BaseProbe):
    """Presents an unsigned token and a weak-secret token."""

    name = "JWT Token Validation"
    category = "authorization"
    severity = "high"
    description = "Tests JWT token security and validation"
    recommendation = (
        "Use strong signing secrets, validate algorithms, implement proper token validation"
    )

    def check(self) -> ProbeResult:
        issues = []

        none_response = self._send('GET', AUTH_USER_PATH,
                                   headers={'Authorization': f"Bearer {JWT_NONE_TOKEN}"})
        if none_response.status == 200:
            issues.append('Accepts "none" algorithm JWT tokens')

        weak_response = self._send('GET', AUTH_USER_PATH,
                                   headers={'Authorization': f"Bearer {JWT_WEAK_SECRET_TOKEN}"})
        if weak_response.status == 200:
            issues.append('Uses weak JWT signing secret')

        if issues:
            return self._vulnerable(f"JWT vulnerabilities: {', '.join(issues)}", evidence={'issues': issues})
        return self._secure("JWT implementation appears secure", evidence={'issues': issues})
