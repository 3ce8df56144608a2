"""
Vulnerability probe catalog.

PROBE_CATALOG lists one factory per named probe, in execution order. The
catalog is fixed for the life of the process; build_probe_catalog() binds
every entry to a client for one run.
"""

from functools import partial
from typing import Callable, List

from readiness.probes.base import BaseProbe, TargetUnreachable
from readiness.probes.injection import SqlInjectionProbe, ReflectedXssProbe, StoredXssProbe
from readiness.probes.authentication import WeakPasswordProbe, SessionFixationProbe, BruteForceProbe
from readiness.probes.authorization import IdorProbe, PrivilegeEscalationProbe, JwtValidationProbe
from readiness.probes.crypto import WeakCryptoProbe, TlsConfigurationProbe
from readiness.probes.configuration import (
    InformationDisclosureProbe,
    SecurityHeadersProbe,
    DirectoryTraversalProbe,
)
from readiness.probes.data_exposure import ApiDataLeakageProbe, ErrorMessageLeakageProbe

ProbeFactory = Callable[..., BaseProbe]

PROBE_CATALOG: List[ProbeFactory] = [
    partial(
        SqlInjectionProbe,
        endpoint='/api/auth/login',
        payload={'username': "admin' OR '1'='1'--", 'password': 'test'},
        name='SQL Injection - Login Form',
        description='Tests for SQL injection vulnerabilities in authentication',
    ),
    partial(
        SqlInjectionProbe,
        endpoint='/api/users/search',
        payload={'query': "'; DROP TABLE users; --"},
        name='SQL Injection - User Search',
        description='Tests for SQL injection in user search functionality',
    ),
    partial(
        ReflectedXssProbe,
        path='/api/transactions?search=<script>alert("xss")</script>',
        name='Reflected XSS - Search Parameters',
        description='Tests for reflected XSS in search parameters',
    ),
    partial(
        StoredXssProbe,
        endpoint='/api/users/profile',
        field_name='bio',
        payload='<img src=x onerror=alert("xss")>',
        name='Stored XSS - User Profile',
        description='Tests for stored XSS in user profile data',
    ),
    WeakPasswordProbe,
    SessionFixationProbe,
    BruteForceProbe,
    IdorProbe,
    PrivilegeEscalationProbe,
    JwtValidationProbe,
    WeakCryptoProbe,
    TlsConfigurationProbe,
    InformationDisclosureProbe,
    SecurityHeadersProbe,
    DirectoryTraversalProbe,
    ApiDataLeakageProbe,
    ErrorMessageLeakageProbe,
]


def build_probe_catalog(client) -> List[BaseProbe]:
    """Instantiate every catalog entry against *client*."""
    return [factory(client) for factory in PROBE_CATALOG]


__all__ = ['BaseProbe', 'TargetUnreachable', 'PROBE_CATALOG', 'build_probe_catalog']
