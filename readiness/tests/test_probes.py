"""
Tests for the vulnerability probe catalog.

Each probe runs against a FakeTarget: the default routes behave like a
hardened service, and per-test overrides make one weakness visible.
"""

import unittest

from readiness.config import JWT_NONE_TOKEN
from readiness.models.results import ProbeResult
from readiness.probes import PROBE_CATALOG, BaseProbe, build_probe_catalog
from readiness.probes.authentication import (
    BruteForceProbe,
    SessionFixationProbe,
    WeakPasswordProbe,
    extract_session_id,
)
from readiness.probes.authorization import IdorProbe, JwtValidationProbe, PrivilegeEscalationProbe
from readiness.probes.configuration import (
    DirectoryTraversalProbe,
    InformationDisclosureProbe,
    SecurityHeadersProbe,
)
from readiness.probes.crypto import TlsConfigurationProbe, WeakCryptoProbe
from readiness.probes.data_exposure import ApiDataLeakageProbe, ErrorMessageLeakageProbe
from readiness.probes.injection import ReflectedXssProbe, SqlInjectionProbe, StoredXssProbe
from readiness.tests.fakes import DownTarget, FakeTarget, respond


class ExplodingProbe(BaseProbe):
    name = "Exploding Probe"
    category = "configuration"
    severity = "high"
    description = "Raises from check()"

    def check(self) -> ProbeResult:
        raise RuntimeError("parser crashed")


class TestCatalog(unittest.TestCase):
    def test_catalog_size_and_unique_names(self):
        probes = build_probe_catalog(FakeTarget())
        names = [probe.definition.name for probe in probes]
        self.assertEqual(len(PROBE_CATALOG), 17)
        self.assertEqual(len(set(names)), len(names))

    def test_every_category_covered(self):
        categories = {probe.definition.category for probe in build_probe_catalog(FakeTarget())}
        self.assertEqual(categories, {
            'injection', 'authentication', 'authorization',
            'crypto', 'configuration', 'data_exposure',
        })

    def test_hardened_target_has_no_findings(self):
        for probe in build_probe_catalog(FakeTarget()):
            result = probe.run()
            self.assertTrue(result.passed, f"{probe.definition.name}: {result.details}")
            self.assertFalse(result.vulnerable, f"{probe.definition.name}: {result.details}")
            self.assertIs(result.definition, probe.definition)

    def test_parameterized_entries_keep_their_names(self):
        names = [probe.definition.name for probe in build_probe_catalog(FakeTarget())]
        self.assertIn('SQL Injection - Login Form', names)
        self.assertIn('SQL Injection - User Search', names)


class TestExecutionPolicy(unittest.TestCase):
    def test_execution_error_is_not_a_finding_by_default(self):
        result = ExplodingProbe(FakeTarget()).run()
        self.assertFalse(result.passed)
        self.assertFalse(result.vulnerable)
        self.assertIn('execution failed', result.details)
        self.assertEqual(result.definition.name, 'Exploding Probe')

    def test_fail_closed_turns_error_into_finding(self):
        result = ExplodingProbe(FakeTarget()).run(fail_closed=True)
        self.assertFalse(result.passed)
        self.assertTrue(result.vulnerable)
        self.assertTrue(result.recommendation)

    def test_unreachable_target_is_never_a_finding(self):
        for fail_closed in (False, True):
            result = IdorProbe(DownTarget()).run(fail_closed=fail_closed)
            self.assertFalse(result.passed)
            self.assertFalse(result.vulnerable)
            self.assertTrue(result.details.startswith('target unreachable'))

    def test_unreachable_registration_endpoint(self):
        result = WeakPasswordProbe(DownTarget()).run()
        self.assertFalse(result.passed)
        self.assertFalse(result.vulnerable)

    def test_whole_catalog_against_down_target(self):
        for probe in build_probe_catalog(DownTarget('https://down.test')):
            result = probe.run()
            self.assertFalse(result.vulnerable, probe.definition.name)


class TestInjectionProbes(unittest.TestCase):
    def test_sql_error_fingerprint(self):
        target = FakeTarget(overrides={
            ('POST', '/api/auth/login'): respond(500, 'You have an error in your SQL syntax near'),
        })
        result = SqlInjectionProbe(target, endpoint='/api/auth/login', payload={'username': "'"}).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.definition.severity, 'critical')

    def test_generic_server_error(self):
        target = FakeTarget(overrides={('POST', '/search'): respond(500, '{"error": "oops"}')})
        result = SqlInjectionProbe(target, endpoint='/search', payload={}).run()
        self.assertTrue(result.vulnerable)

    def test_reflected_script(self):
        target = FakeTarget(overrides={
            ('GET', '/api/transactions'): respond(200, 'results for <script>alert("xss")</script>'),
        })
        result = ReflectedXssProbe(target, path='/api/transactions?search=<script>').run()
        self.assertTrue(result.vulnerable)

    def test_encoded_reflection_is_safe(self):
        target = FakeTarget(overrides={
            ('GET', '/api/transactions'): respond(200, 'results for &lt;script&gt;alert(1)'),
        })
        result = ReflectedXssProbe(target, path='/api/transactions?search=<script>').run()
        self.assertFalse(result.vulnerable)

    def test_stored_payload_returned_raw(self):
        payload = '<img src=x onerror=alert("xss")>'
        target = FakeTarget(overrides={
            ('GET', '/api/users/profile'): respond(200, '{"bio": "%s"}' % payload),
        })
        result = StoredXssProbe(target, endpoint='/api/users/profile', field_name='bio',
                                payload=payload).run()
        self.assertTrue(result.vulnerable)
        self.assertIn(('POST', '/api/users/profile'), target.calls)


class TestAuthenticationProbes(unittest.TestCase):
    def test_weak_password_accepted(self):
        target = FakeTarget(overrides={('POST', '/api/auth/register'): respond(201, '{"id": 9}')})
        result = WeakPasswordProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.evidence['status'], 201)

    def test_session_not_regenerated(self):
        target = FakeTarget(overrides={
            ('GET', '/api/auth/session'): respond(200, '{}', cookies={'sessionid': 'fixed'}),
            ('POST', '/api/auth/login'): respond(200, '{}', cookies={'sessionid': 'fixed'}),
        })
        self.assertTrue(SessionFixationProbe(target).run().vulnerable)

    def test_session_regenerated(self):
        target = FakeTarget(overrides={
            ('GET', '/api/auth/session'): respond(200, '{}', cookies={'connect.sid': 'before'}),
            ('POST', '/api/auth/login'): respond(200, '{}', cookies={'connect.sid': 'after'}),
        })
        result = SessionFixationProbe(target).run()
        self.assertTrue(result.passed)
        self.assertFalse(result.vulnerable)

    def test_no_rate_limiting(self):
        target = FakeTarget(overrides={('POST', '/api/auth/login'): respond(401, '{}')})
        result = BruteForceProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.evidence['blockedRequests'], 0)

    def test_extract_session_id(self):
        self.assertEqual(extract_session_id({'theme': 'dark', 'SessionID': 'abc'}), 'abc')
        self.assertIsNone(extract_session_id({'theme': 'dark'}))


class TestAuthorizationProbes(unittest.TestCase):
    def test_other_users_record_exposed(self):
        target = FakeTarget(overrides={
            ('GET', '/api/users/2'): respond(200, '{"id": 2, "email": "b@example.com"}'),
        })
        result = IdorProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.evidence['path'], '/api/users/2')

    def test_admin_endpoint_open(self):
        target = FakeTarget(overrides={('GET', '/api/admin/users'): respond(200, '[]')})
        result = PrivilegeEscalationProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.definition.severity, 'critical')

    def test_unsigned_token_accepted(self):
        def auth_user(body, headers):
            if JWT_NONE_TOKEN in headers.get('Authorization', ''):
                return respond(200, '{"id": 1}')
            return respond(401, '{}')

        target = FakeTarget(overrides={('GET', '/api/auth/user'): auth_user})
        result = JwtValidationProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(len(result.evidence['issues']), 1)


class TestCryptoProbes(unittest.TestCase):
    def test_weak_algorithm_exposed(self):
        target = FakeTarget(overrides={
            ('GET', '/api/crypto/config'): respond(200, '{"hash": "MD5", "cipher": "AES-256"}'),
        })
        self.assertTrue(WeakCryptoProbe(target).run().vulnerable)

    def test_strong_algorithms(self):
        target = FakeTarget(overrides={
            ('GET', '/api/crypto/config'): respond(200, '{"hash": "sha256", "cipher": "aes-256-gcm"}'),
        })
        self.assertFalse(WeakCryptoProbe(target).run().vulnerable)

    def test_plain_http_target(self):
        target = FakeTarget('http://insecure.test')
        result = TlsConfigurationProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(target.calls, [])

    def test_https_target(self):
        self.assertFalse(TlsConfigurationProbe(FakeTarget()).run().vulnerable)


class TestConfigurationProbes(unittest.TestCase):
    def test_env_file_served(self):
        target = FakeTarget(overrides={('GET', '/.env'): respond(200, 'SECRET_KEY=x')})
        result = InformationDisclosureProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.evidence['disclosedEndpoints'], ['/.env'])

    def test_missing_headers(self):
        target = FakeTarget(overrides={('GET', '/'): respond(200, '<html></html>', headers={})})
        result = SecurityHeadersProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(len(result.evidence['missingHeaders']), 5)
        self.assertEqual(result.definition.severity, 'low')

    def test_passwd_returned(self):
        target = FakeTarget(overrides={
            ('GET', '/api/files/../../../etc/passwd'): respond(200, 'root:x:0:0:root:/root:/bin/bash'),
        })
        self.assertTrue(DirectoryTraversalProbe(target).run().vulnerable)


class TestDataExposureProbes(unittest.TestCase):
    def test_password_hash_in_listing(self):
        target = FakeTarget(overrides={
            ('GET', '/api/users'): respond(200, '[{"id": 1, "password": "$2b$12$..."}]'),
        })
        self.assertTrue(ApiDataLeakageProbe(target).run().vulnerable)

    def test_clean_listing(self):
        target = FakeTarget(overrides={('GET', '/api/users'): respond(200, '[{"id": 1, "name": "A"}]')})
        self.assertFalse(ApiDataLeakageProbe(target).run().vulnerable)

    def test_stack_trace_in_error(self):
        target = FakeTarget(overrides={
            ('GET', '/api/nonexistent/endpoint/12345'): respond(404, 'Traceback (most recent call last):'),
        })
        result = ErrorMessageLeakageProbe(target).run()
        self.assertTrue(result.vulnerable)
        self.assertEqual(result.definition.category, 'data_exposure')


if __name__ == '__main__':
    unittest.main(verbosity=2)
