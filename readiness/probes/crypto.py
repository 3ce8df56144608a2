"""
Cryptography probes: exposed weak algorithms and transport encryption.
"""

from urllib.parse import urlparse

from readiness.probes.base import BaseProbe
from readiness.models.results import ProbeResult
from readiness.config import WEAK_CRYPTO_PATTERNS

CRYPTO_CONFIG_PATH = '/api/crypto/config'


class WeakCryptoProbe(BaseProbe):
    """Reads the crypto configuration endpoint and looks for deprecated algorithms."""

    name = "Weak Crypto Implementation"
    category = "crypto"
    severity = "high"
    description = "Tests for weak cryptographic implementations"
    recommendation = "Upgrade to stronger cryptographic algorithms (SHA-256+, AES, TLS 1.2+)"

    def check(self) -> ProbeResult:
        response = self._try_send('GET', CRYPTO_CONFIG_PATH)
        if response is None or not response.succeeded:
            return self._secure("Crypto configuration endpoint not accessible")

        matched = self._first_match(WEAK_CRYPTO_PATTERNS, response.body)
        if matched:
            return self._vulnerable(
                "Weak cryptographic algorithms detected",
                evidence={'pattern': matched},
            )
        return self._secure("Strong cryptography in use")


class TlsConfigurationProbe(BaseProbe):
    """Checks that the target is addressed over HTTPS. Issues no request."""

    name = "TLS Configuration"
    category = "crypto"
    severity = "medium"
    description = "Tests SSL/TLS configuration security"
    recommendation = "Implement HTTPS with proper TLS configuration"

    def check(self) -> ProbeResult:
        scheme = urlparse(self.client.base_url).scheme.lower()
        if scheme != 'https':
            return self._vulnerable("Application not using HTTPS", evidence={'scheme': scheme})
        return self._secure("HTTPS enabled (detailed TLS analysis requires specialized tools)")
