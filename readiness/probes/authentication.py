"""
Authentication probes: password policy, session fixation, brute force.
"""

import uuid
from typing import Dict, Optional

from readiness.probes.base import BaseProbe, TargetUnreachable
from readiness.models.results import ProbeResult
from readiness.config import (
    WEAK_PASSWORDS,
    BRUTE_FORCE_ATTEMPTS,
    RATE_LIMIT_STATUSES,
    SESSION_COOKIE_NAMES,
)

REGISTER_PATH = '/api/auth/register'
LOGIN_PATH = '/api/auth/login'
SESSION_PATH = '/api/auth/session'


def extract_session_id(cookies: Dict[str, str]) -> Optional[str]:
    """Pick the session identifier out of a response's cookies."""
    for name, value in cookies.items():
        if any(marker in name.lower() for marker in SESSION_COOKIE_NAMES):
            return value
    return None


class WeakPasswordProbe(BaseProbe):
    """Tries to register accounts with common weak passwords."""

    name = "Weak Password Policy"
    category = "authentication"
    severity = "medium"
    description = "Tests password strength requirements"
    recommendation = (
        "Implement stronger password requirements (length, complexity, common password blacklist)"
    )

    def check(self) -> ProbeResult:
        reached = False
        for password in WEAK_PASSWORDS:
            suffix = uuid.uuid4().hex[:12]
            response = self._try_send('POST', REGISTER_PATH, body={
                'username': f"probe_{suffix}",
                'password': password,
                'email': f"probe_{suffix}@example.com",
            })
            if response is None:
                continue
            reached = True
            if response.status in (200, 201):
                return self._vulnerable(
                    "System accepts weak passwords",
                    evidence={'acceptedPassword': password, 'status': response.status},
                )

        if not reached:
            raise TargetUnreachable(f"no response from {REGISTER_PATH}")
        return self._secure("Strong password policy enforced")


class SessionFixationProbe(BaseProbe):
    """Checks that the session identifier changes across login."""

    name = "Session Fixation"
    category = "authentication"
    severity = "high"
    description = "Tests for session fixation vulnerabilities"
    recommendation = "Regenerate session IDs after authentication state changes"

    def check(self) -> ProbeResult:
        initial = self._send('GET', SESSION_PATH)
        initial_id = extract_session_id(initial.cookies)

        login = self._send('POST', LOGIN_PATH, body={'username': 'testuser', 'password': 'testpass'})
        after_id = extract_session_id(login.cookies)
        if after_id is None:
            after_id = extract_session_id(self._send('GET', SESSION_PATH).cookies)

        if initial_id is not None and initial_id == after_id:
            return self._vulnerable(
                "Session ID not regenerated after login",
                evidence={'sessionId': initial_id},
            )
        if initial_id is None:
            return self._secure("No pre-authentication session issued")
        return self._secure("Session properly regenerated")


class BruteForceProbe(BaseProbe):
    """Fires repeated failed logins and expects throttling."""

    name = "Brute Force Protection"
    category = "authentication"
    severity = "medium"
    description = "Tests rate limiting on authentication endpoints"
    recommendation = "Implement rate limiting and account lockout mechanisms"

    def check(self) -> ProbeResult:
        blocked = 0
        answered = 0
        for attempt in range(BRUTE_FORCE_ATTEMPTS):
            response = self._try_send('POST', LOGIN_PATH, body={
                'username': 'admin',
                'password': f"wrongpassword{attempt}",
            })
            if response is None:
                continue
            answered += 1
            if response.status in RATE_LIMIT_STATUSES:
                blocked += 1

        if answered == 0:
            raise TargetUnreachable(f"no response from {LOGIN_PATH}")

        evidence = {'blockedRequests': blocked, 'totalAttempts': BRUTE_FORCE_ATTEMPTS}
        if blocked == 0:
            return self._vulnerable("No rate limiting detected", evidence=evidence)
        return self._secure("Rate limiting activated after failed attempts", evidence=evidence)
