"""
Global configuration and default settings for the readiness assessment.

Defines paths, timeouts, concurrency limits, scoring weights and the signal
catalogs used by the probes. All modules should import settings from here
rather than hardcoding values.
"""

from pathlib import Path

# ============================================================================
# PROJECT PATHS
# ============================================================================

PROJECT_ROOT = Path(__file__).parent
TEMPLATE_DIR = PROJECT_ROOT / "reporter" / "templates"

# Reports are written relative to the working directory, one file per run
REPORT_DIR = Path.cwd() / "reports"
REPORT_PREFIX = "readiness_report"

# ============================================================================
# PROBE CLIENT SETTINGS
# ============================================================================

# Per-call timeout in seconds. Every network exchange is bounded by it.
REQUEST_TIMEOUT = 5

USER_AGENT = "ReadinessProbe/1.0 (Enterprise Readiness Assessment)"

# Authorization probes must see the raw status of the first response
FOLLOW_REDIRECTS = False

VERIFY_SSL = False

# Generic failure markers carried by a failed ProbeResponse
ERROR_TIMEOUT = "timeout"
ERROR_CONNECTION = "connection failed"

# ============================================================================
# LOAD TEST SETTINGS
# ============================================================================

DEFAULT_ENDPOINTS = [
    '/api/transactions',
    '/api/users/me',
    '/api/trust-score/1',
    '/api/industry/fintech/verify',
    '/api/industry/crypto/verify',
    '/api/enterprise/dashboard/overview',
    '/api/demo/crypto/assess-risk',
]

# Virtual users per endpoint
DEFAULT_CONCURRENCY = 25

DEFAULT_REQUESTS_PER_USER = 10

# Seconds over which virtual user start times are spread
DEFAULT_RAMP_UP = 5

# Seconds used as the denominator of requests-per-second
DEFAULT_TEST_DURATION = 60

# Upper bound of the uniform think-time between two calls (seconds)
THINK_TIME_MAX = 0.1

MAX_CONCURRENCY = 1000

# ============================================================================
# STRESS PROFILE
# ============================================================================

STRESS_TIERS = (10, 50, 100, 200, 500)

STRESS_ENDPOINTS = [
    '/api/transactions',
    '/api/users/me',
    '/api/trust-score',
]

STRESS_REQUESTS_PER_USER = 10

STRESS_RAMP_UP = 10

# Mean error rate (percent) at which the profile stops early
STRESS_ERROR_THRESHOLD = 10.0

# Mean latency (ms) above which a tier is flagged as degraded
STRESS_LATENCY_WARNING = 5000

# Pause between tiers (seconds)
STRESS_COOLDOWN = 10

# ============================================================================
# VULNERABILITY PROBE BATTERY
# ============================================================================

PROBE_CATEGORIES = (
    'injection',
    'authentication',
    'authorization',
    'crypto',
    'configuration',
    'data_exposure',
)

SEVERITY_ORDER = ('critical', 'high', 'medium', 'low', 'info')

# Points removed from the security score per vulnerable finding
SEVERITY_WEIGHTS = {
    'critical': 25,
    'high': 15,
    'medium': 8,
    'low': 3,
    'info': 0,
}

# (minimum score, label), checked top-down
SECURITY_TIERS = (
    (90, 'excellent'),
    (75, 'good'),
    (60, 'fair'),
    (0, 'poor'),
)

# When True, a probe that fails to execute is reported as a finding of the
# probe's own severity instead of "no evidence".
FAIL_CLOSED_ON_ERROR = False

# SQLi: error fingerprints leaked by common database drivers
SQLI_ERROR_PATTERNS = [
    r'sql syntax',
    r'mysql',
    r'postgres',
    r'sqlite',
    r'syntax error',
    r'ORA-\d+',
    r'microsoft odbc',
    r'unclosed quotation mark',
    r'quoted string not properly terminated',
]

# XSS: markers of an unescaped reflected payload
XSS_REFLECTION_MARKERS = ['<script>', 'onerror=']

# XSS: markers of properly encoded output
XSS_ENCODED_MARKERS = ['&lt;script&gt;', '&lt;img', '&quot;']

WEAK_PASSWORDS = ['123456', 'password', 'admin', 'test', 'qwerty']

BRUTE_FORCE_ATTEMPTS = 10

# Status codes that show an authentication endpoint is throttling
RATE_LIMIT_STATUSES = (423, 429)

SESSION_COOKIE_NAMES = ('sessionid', 'connect.sid', 'session')

IDOR_USER_IDS = [1, 2, 3, 999, -1]

ADMIN_ENDPOINTS = [
    '/api/admin/users',
    '/api/admin/transactions',
    '/api/enterprise/dashboard',
]

# Unsigned token ("alg": "none") and a token signed with the secret "secret"
JWT_NONE_TOKEN = (
    'eyJ0eXAiOiJKV1QiLCJhbGciOiJub25lIn0.'
    'eyJzdWIiOiIxMjM0NTY3ODkwIiwibmFtZSI6IkpvaG4gRG9lIiwiaWF0IjoxNTE2MjM5MDIyfQ.'
)
JWT_WEAK_SECRET_TOKEN = (
    'eyJ0eXAiOiJKV1QiLCJhbGciOiJIUzI1NiJ9.'
    'eyJzdWIiOiIxMjM0NTY3ODkwIiwibmFtZSI6IkpvaG4gRG9lIiwiaWF0IjoxNTE2MjM5MDIyfQ.'
    'XbPfbIHMI6arZ3Y922BhjWgQzWXcXNrz0ogtVhfEd2o'
)

WEAK_CRYPTO_PATTERNS = [
    r'\bmd5\b',
    r'\bsha-?1\b',
    r'\b3?des\b',
    r'\brc4\b',
    r'\bssl\s?v?[123]\b',
]

REQUIRED_SECURITY_HEADERS = [
    'X-Frame-Options',
    'X-Content-Type-Options',
    'X-XSS-Protection',
    'Strict-Transport-Security',
    'Content-Security-Policy',
]

SENSITIVE_PATHS = [
    '/.env',
    '/config.json',
    '/package.json',
    '/.git/config',
    '/admin',
    '/debug',
    '/test',
]

TRAVERSAL_PAYLOADS = [
    '../../../etc/passwd',
    '..\\..\\..\\windows\\system32\\drivers\\etc\\hosts',
    '....//....//....//etc/passwd',
    '%2e%2e%2f%2e%2e%2f%2e%2e%2fetc%2fpasswd',
]

# File contents that prove a traversal payload escaped the web root
TRAVERSAL_MARKERS = ['root:x:0:0', 'root:*:0:0', '# Copyright (c) 1993-2009 Microsoft']

SENSITIVE_DATA_PATTERNS = [
    r'password',
    r'secret',
    r'private.?key',
    r'\bssn\b',
    r'social.?security',
    r'credit.?card',
]

ERROR_LEAK_PATTERNS = [
    r'file.?path',
    r'database',
    r'\bsql\b',
    r'stack.?trace',
    r'traceback',
    r'internal.?server',
    r'localhost',
    r'127\.0\.0\.1',
]

# ============================================================================
# COMPLIANCE EVALUATION
# ============================================================================

COMPLIANCE_FRAMEWORKS = ('NIST', 'ISO27001', 'SOC2', 'PCI_DSS', 'GDPR', 'SOX')

COMPLIANCE_CATEGORIES = (
    'access_control',
    'data_protection',
    'audit_logging',
    'encryption',
    'compliance',
    'incident_response',
)

# Extensions the source-tree inspector reads
SOURCE_EXTENSIONS = ('.py', '.ts', '.tsx', '.js', '.jsx', '.md', '.toml', '.yaml', '.yml', '.json')

# Directories never descended into (hidden directories are skipped as well)
SKIP_DIRECTORIES = {
    'node_modules', 'vendor', 'venv', '.venv', '__pycache__',
    'dist', 'build', 'site-packages',
}

# Files larger than this are not read (bytes)
MAX_SCAN_FILE_SIZE = 2 * 1024 * 1024

# (minimum overall score, risk level)
COMPLIANCE_RISK_TIERS = (
    (90, 'low'),
    (70, 'medium'),
    (0, 'high'),
)

# ============================================================================
# AGGREGATION
# ============================================================================

PHASE_WEIGHTS = {
    'performance': 0.30,
    'security': 0.35,
    'compliance': 0.35,
}

READINESS_TIERS = (
    (90, 'Enterprise Ready'),
    (75, 'Nearly Ready'),
    (60, 'Needs Improvement'),
    (0, 'Significant Issues'),
)

PERFORMANCE_RECOMMENDATION_THRESHOLD = 80
SECURITY_RECOMMENDATION_THRESHOLD = 85
COMPLIANCE_RECOMMENDATION_THRESHOLD = 85
POSITIVE_ASSESSMENT_THRESHOLD = 85

# ============================================================================
# LOGGING
# ============================================================================

LOG_FORMAT = '[%(asctime)s] %(levelname)s [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# ANSI colour per level number; applied only when the stream is a terminal
LEVEL_COLOURS = {
    10: '\033[36m',   # DEBUG
    20: '\033[32m',   # INFO
    30: '\033[33m',   # WARNING
    40: '\033[31m',   # ERROR
    50: '\033[35m',   # CRITICAL
}
COLOUR_RESET = '\033[0m'
