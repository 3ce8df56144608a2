"""
Versioned compliance rule table.

Each control combines two to four weighted signals (weights sum to 100)
into a partial-credit score. A signal is a read-only lookup against the
target's source tree or environment:

    file            a path matching the glob exists
    pattern         some source file under scope matches the regex
    absent_pattern  no source file under scope matches the regex
    env             the environment variable is set and non-empty
    env_pattern     the environment variable matches the regex

A control is compliant when its score reaches the threshold and every
required signal holds.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple

from readiness.models.results import ControlResult
from readiness.utils.inspector import SourceTreeInspector
from readiness.config import COMPLIANCE_FRAMEWORKS, COMPLIANCE_CATEGORIES

RULESET_VERSION = '2024.1'

SIGNAL_KINDS = ('file', 'pattern', 'absent_pattern', 'env', 'env_pattern')


@dataclass(frozen=True)
class Signal:
    id: str
    kind: str
    target: str                     # glob, regex or environment variable name
    weight: int
    pattern: Optional[str] = None   # env_pattern only
    scope: str = '.'
    required: bool = False

    def __post_init__(self):
        if self.kind not in SIGNAL_KINDS:
            raise ValueError(f"Unknown signal kind: {self.kind}")


def evaluate_signal(signal: Signal, inspector: SourceTreeInspector) -> bool:
    """Evaluate one signal against the inspector."""
    if signal.kind == 'file':
        return inspector.file_exists(signal.target)
    if signal.kind == 'pattern':
        return inspector.contains(signal.target, signal.scope)
    if signal.kind == 'absent_pattern':
        return not inspector.contains(signal.target, signal.scope)
    if signal.kind == 'env':
        return inspector.env_present(signal.target)
    return inspector.env_contains(signal.target, signal.pattern or '')


@dataclass(frozen=True)
class ControlDefinition:
    """
    Static description of one compliance control and its scoring rule.

    fail_risk is the risk level reported while the control is non-compliant.
    """
    id: str
    name: str
    category: str
    framework: str
    description: str
    requirement: str
    threshold: int
    fail_risk: str
    recommendations: Tuple[str, ...]
    signals: Tuple[Signal, ...]

    def __post_init__(self):
        if self.framework not in COMPLIANCE_FRAMEWORKS:
            raise ValueError(f"{self.id}: unknown framework {self.framework}")
        if self.category not in COMPLIANCE_CATEGORIES:
            raise ValueError(f"{self.id}: unknown category {self.category}")
        total = sum(signal.weight for signal in self.signals)
        if total != 100:
            raise ValueError(f"{self.id}: signal weights sum to {total}, expected 100")

    def run(self, inspector: SourceTreeInspector) -> ControlResult:
        evidence: Dict[str, bool] = {
            signal.id: evaluate_signal(signal, inspector) for signal in self.signals
        }
        score = sum(signal.weight for signal in self.signals if evidence[signal.id])
        required_met = all(evidence[signal.id] for signal in self.signals if signal.required)
        compliant = score >= self.threshold and required_met

        details = ', '.join(f"{key}: {value}" for key, value in evidence.items())
        return ControlResult(
            control_id=self.id,
            passed=score > 0,
            compliant=compliant,
            score=score,
            details=f"{self.name}: {details}",
            recommendations=() if compliant else self.recommendations,
            risk_level='low' if compliant else self.fail_risk,
            evidence=evidence,
        )


CONTROL_CATALOG: Tuple[ControlDefinition, ...] = (
    # Access control
    ControlDefinition(
        id='AC-001',
        name='Multi-Factor Authentication Implementation',
        category='access_control',
        framework='NIST',
        description='Verify MFA is enforced for privileged accounts',
        requirement='NIST 800-53 IA-2(1): Multi-factor Authentication',
        threshold=80,
        fail_risk='high',
        recommendations=(
            'Implement multi-factor authentication for all privileged accounts',
            'Integrate MFA into authentication middleware',
            'Enforce MFA for admin and developer access',
        ),
        signals=(
            Signal('mfa_module', 'file', '**/*mfa*', 50),
            Signal('mfa_in_auth', 'pattern', r'mfa|two.?factor|2fa|totp', 50),
        ),
    ),
    ControlDefinition(
        id='AC-002',
        name='Role-Based Access Control',
        category='access_control',
        framework='ISO27001',
        description='Verify RBAC implementation and principle of least privilege',
        requirement='ISO 27001 A.9.1.2: Access to networks and network services',
        threshold=80,
        fail_risk='high',
        recommendations=(
            'Implement comprehensive role-based access control',
            'Define clear role hierarchies and permissions',
            'Apply principle of least privilege consistently',
        ),
        signals=(
            Signal('rbac_module', 'file', '**/*rbac*', 40),
            Signal('role_checks', 'pattern', r'has_?role|require_?role|permission|privilege', 30),
            Signal('user_roles', 'pattern', r'\brole\b', 30),
        ),
    ),
    ControlDefinition(
        id='AC-003',
        name='Session Management Controls',
        category='access_control',
        framework='SOC2',
        description='Verify secure session handling and timeout controls',
        requirement='SOC 2 CC6.1: Logical and physical access controls',
        threshold=70,
        fail_risk='medium',
        recommendations=(
            'Configure secure session cookies (httpOnly, secure, sameSite)',
            'Implement session timeout controls',
            'Add session rotation on privilege elevation',
        ),
        signals=(
            Signal('secure_cookies', 'pattern', r'session.*secure|http_?only|same_?site', 40),
            Signal('session_timeout', 'pattern', r'max_?age|expires|session.*timeout', 30),
            Signal('session_rotation', 'pattern', r'regenerate|rotate', 30),
        ),
    ),

    # Data protection
    ControlDefinition(
        id='DP-001',
        name='Data Encryption at Rest',
        category='data_protection',
        framework='PCI_DSS',
        description='Verify sensitive data is encrypted when stored',
        requirement='PCI DSS 3.4: Protect stored cardholder data',
        threshold=70,
        fail_risk='critical',
        recommendations=(
            'Implement database-level encryption for sensitive data',
            'Encrypt file storage and backups',
            'Use proper secrets management for encryption keys',
        ),
        signals=(
            Signal('database_encryption', 'pattern', r'encrypt|cipher|\baes\b', 40),
            Signal('storage_encryption', 'pattern', r'encrypt.*(file|storage|backup)|(file|storage|backup).*encrypt', 30),
            Signal('database_url_from_env', 'env', 'DATABASE_URL', 30),
        ),
    ),
    ControlDefinition(
        id='DP-002',
        name='Data Encryption in Transit',
        category='data_protection',
        framework='PCI_DSS',
        description='Verify data is encrypted during transmission',
        requirement='PCI DSS 4.1: Use strong cryptography for data transmission',
        threshold=80,
        fail_risk='critical',
        recommendations=(
            'Enforce HTTPS for all communications',
            'Use TLS 1.2+ with strong cipher suites',
            'Secure database connections with SSL/TLS',
        ),
        signals=(
            Signal('https_enforced', 'pattern', r'https|\bssl\b|\btls\b', 40),
            Signal('transport_hardening', 'pattern', r'helmet|hsts|strict-transport-security', 30),
            Signal('database_ssl', 'env_pattern', 'DATABASE_URL', 30, pattern=r'ssl'),
        ),
    ),
    ControlDefinition(
        id='DP-003',
        name='Personal Data Protection (GDPR)',
        category='data_protection',
        framework='GDPR',
        description='Verify GDPR compliance for personal data handling',
        requirement='GDPR Article 25: Data protection by design and by default',
        threshold=75,
        fail_risk='high',
        recommendations=(
            'Implement comprehensive privacy policy and consent management',
            'Add data portability and export capabilities',
            'Apply data minimization principles',
            'Implement right to erasure functionality',
        ),
        signals=(
            Signal('privacy_policy', 'file', '**/*[Pp]rivacy*', 25),
            Signal('data_portability', 'pattern', r'export.*data|download.*data', 25),
            Signal('data_minimization', 'pattern', r'\blimit\b|select.*specific', 25),
            Signal('consent_management', 'pattern', r'consent|agreement', 25),
        ),
    ),
    ControlDefinition(
        id='DP-004',
        name='Data Retention Policy',
        category='data_protection',
        framework='GDPR',
        description='Verify data retention and deletion policies',
        requirement='GDPR Article 17: Right to erasure',
        threshold=70,
        fail_risk='medium',
        recommendations=(
            'Implement documented data retention policy',
            'Add automatic deletion of expired data',
            'Provide user account deletion capabilities',
        ),
        signals=(
            Signal('retention_policy', 'file', '**/*[Rr]etention*', 40),
            Signal('automatic_deletion', 'pattern', r'delete.*old|retention|cleanup|purge', 30),
            Signal('user_deletion', 'pattern', r'delete.*user|remove.*account', 30),
        ),
    ),

    # Audit logging
    ControlDefinition(
        id='AL-001',
        name='Comprehensive Audit Logging',
        category='audit_logging',
        framework='SOX',
        description='Verify all financial transactions are logged',
        requirement='SOX Section 404: Internal controls over financial reporting',
        threshold=80,
        fail_risk='critical',
        recommendations=(
            'Implement comprehensive audit logging for all financial transactions',
            'Log all user actions and system changes',
            'Ensure logs are tamper-proof and accessible for compliance',
        ),
        signals=(
            Signal('audit_logging', 'pattern', r'audit|log.*transaction|financial.*log', 40),
            Signal('transaction_history', 'pattern', r'transaction.*(log|history)|history', 30),
            Signal('user_action_logging', 'pattern', r'log.*usage|log.*action|audit', 30),
        ),
    ),
    ControlDefinition(
        id='AL-002',
        name='Log Integrity Protection',
        category='audit_logging',
        framework='SOC2',
        description='Verify audit logs are tamper-proof',
        requirement='SOC 2 CC3.4: Log management and monitoring',
        threshold=70,
        fail_risk='high',
        recommendations=(
            'Implement cryptographic log signing for integrity',
            'Use secure, append-only log storage',
            'Monitor logs for tampering attempts',
        ),
        signals=(
            Signal('log_signing', 'pattern', r'sign.*log|hash.*log|integrity', 40),
            Signal('audit_log_store', 'file', '**/*[Aa]udit*[Ll]og*', 30),
            Signal('log_monitoring', 'pattern', r'monitor.*log|alert.*log', 30),
        ),
    ),
    ControlDefinition(
        id='AL-003',
        name='Security Event Monitoring',
        category='audit_logging',
        framework='NIST',
        description='Verify security events are monitored and alerted',
        requirement='NIST 800-53 AU-6: Audit Review, Analysis, and Reporting',
        threshold=70,
        fail_risk='high',
        recommendations=(
            'Implement real-time security monitoring and alerting',
            'Add intrusion detection capabilities',
            'Set up automated threat response mechanisms',
        ),
        signals=(
            Signal('security_alerts', 'pattern', r'alert|notify.*security|threat', 40),
            Signal('intrusion_detection', 'pattern', r'intrusion|suspicious|anomal', 30),
            Signal('realtime_monitoring', 'pattern', r'monitor|real.?time', 30),
        ),
    ),

    # Encryption
    ControlDefinition(
        id='EN-001',
        name='Cryptographic Algorithm Strength',
        category='encryption',
        framework='NIST',
        description='Verify use of approved cryptographic algorithms',
        requirement='NIST 800-53 SC-13: Cryptographic Protection',
        threshold=80,
        fail_risk='critical',
        recommendations=(
            'Use only approved cryptographic algorithms (AES-256, SHA-256+, RSA-2048+)',
            'Remove any weak cryptographic implementations',
            'Use cryptographically secure random number generation',
        ),
        signals=(
            Signal('strong_algorithms', 'pattern', r'aes.?256|sha.?256|rsa.?2048|ecdsa', 40),
            Signal('no_weak_algorithms', 'absent_pattern', r'\b(md5|sha1|des|rc4)\b', 30, required=True),
            Signal('secure_random', 'pattern', r'randomBytes|getRandomValues|secrets\.token|os\.urandom', 30),
        ),
    ),
    ControlDefinition(
        id='EN-002',
        name='Key Management Controls',
        category='encryption',
        framework='PCI_DSS',
        description='Verify secure cryptographic key management',
        requirement='PCI DSS 3.6: Fully document and implement key-management processes',
        threshold=70,
        fail_risk='critical',
        recommendations=(
            'Implement automatic key rotation policies',
            'Use hardware security modules or secure key vaults',
            'Apply strict access controls to cryptographic keys',
        ),
        signals=(
            Signal('key_rotation', 'pattern', r'rotate.*key|key.*rotation', 40),
            Signal('secret_key_from_env', 'env', 'SECRET_KEY', 30),
            Signal('key_access_control', 'pattern', r'key.*access|access.*key', 30),
        ),
    ),

    # Regulatory
    ControlDefinition(
        id='CO-001',
        name='Financial Data Protection',
        category='compliance',
        framework='SOX',
        description='Verify financial data integrity controls',
        requirement='SOX Section 302: Corporate responsibility for financial reports',
        threshold=80,
        fail_risk='critical',
        recommendations=(
            'Implement comprehensive financial data audit trails',
            'Ensure data integrity controls for financial information',
            'Apply strict access controls to financial data',
        ),
        signals=(
            Signal('financial_audit', 'pattern', r'financial.*(audit|compliance)|(audit|compliance).*financial', 40),
            Signal('data_integrity', 'pattern', r'integrity|checksum|\bhmac\b', 30),
            Signal('financial_access', 'pattern', r'financ\w*.*(auth|permission)', 30),
        ),
    ),
    ControlDefinition(
        id='CO-002',
        name='Payment Card Data Security',
        category='compliance',
        framework='PCI_DSS',
        description='Verify PCI DSS compliance for payment processing',
        requirement='PCI DSS Requirements 1-12: Complete compliance framework',
        threshold=80,
        fail_risk='critical',
        recommendations=(
            'Use PCI-compliant payment processors for card data',
            'Implement network segmentation and firewall rules',
            'Maintain regular vulnerability scanning and patching',
        ),
        signals=(
            Signal('tokenized_payments', 'pattern', r'stripe|payment.*secure|tokeni[sz]e', 40),
            Signal('network_security', 'pattern', r'firewall|network.*security', 30),
            Signal('security_test_suite', 'file', '**/test*', 30),
        ),
    ),

    # Incident response
    ControlDefinition(
        id='IR-001',
        name='Incident Response Plan',
        category='incident_response',
        framework='ISO27001',
        description='Verify incident response procedures are documented and tested',
        requirement='ISO 27001 A.16.1: Management of information security incidents',
        threshold=75,
        fail_risk='medium',
        recommendations=(
            'Document comprehensive incident response procedures',
            'Implement automated incident detection and alerting',
            'Maintain security documentation and playbooks',
        ),
        signals=(
            Signal('incident_plan', 'file', '**/*incident*response*', 50),
            Signal('incident_alerting', 'pattern', r'alert|notify.*incident|emergency', 25),
            Signal('security_documentation', 'file', '*.md', 25),
        ),
    ),
    ControlDefinition(
        id='IR-002',
        name='Security Breach Notification',
        category='incident_response',
        framework='GDPR',
        description='Verify breach notification capabilities',
        requirement='GDPR Article 33: Notification of personal data breach to supervisory authority',
        threshold=70,
        fail_risk='high',
        recommendations=(
            'Implement automated breach detection and notification',
            'Establish direct communication channels with authorities',
            'Ensure 72-hour notification compliance for GDPR',
        ),
        signals=(
            Signal('breach_notification', 'pattern', r'breach.*notif|notif\w*.*breach', 40),
            Signal('authority_contact', 'pattern', r'email.*admin|notify.*authorit', 30),
            Signal('notification_deadline', 'pattern', r'72.*hour|immediate.*notif', 30),
        ),
    ),
)

CONTROL_REGISTRY: Dict[str, ControlDefinition] = {control.id: control for control in CONTROL_CATALOG}


def rule_table() -> Iterator[Dict[str, object]]:
    """Yield one row per (control, signal) for display and auditing."""
    for control in CONTROL_CATALOG:
        for signal in control.signals:
            yield {
                'control': control.id,
                'signal': signal.id,
                'category': control.category,
                'framework': control.framework,
                'weight': signal.weight,
                'required': signal.required,
            }
