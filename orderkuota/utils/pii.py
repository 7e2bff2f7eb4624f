"""Secret and PII masking for anything that reaches a log."""

import re
from typing import Iterable, Optional

from presidio_analyzer import AnalyzerEngine, RecognizerResult
from presidio_anonymizer import AnonymizerEngine
from presidio_anonymizer.entities import OperatorConfig


# Initialize Presidio engines (lazy loading)
_analyzer: Optional[AnalyzerEngine] = None
_anonymizer: Optional[AnonymizerEngine] = None


def _get_analyzer() -> AnalyzerEngine:
    """Get or create the Presidio analyzer engine."""
    global _analyzer
    if _analyzer is None:
        _analyzer = AnalyzerEngine()
    return _analyzer


def _get_anonymizer() -> AnonymizerEngine:
    """Get or create the Presidio anonymizer engine."""
    global _anonymizer
    if _anonymizer is None:
        _anonymizer = AnonymizerEngine()
    return _anonymizer


# Entity types worth hiding in account and history payloads
ACCOUNT_ENTITIES = [
    "EMAIL_ADDRESS",
    "PHONE_NUMBER",
    "PERSON",
    "CREDIT_CARD",
    "IBAN_CODE",
    "IP_ADDRESS",
]

SENSITIVE_FIELDS = {
    "password", "pin", "apikey", "api_key", "token", "auth_token",
    "otp", "secret", "email", "phone", "app_reg_id",
}

SECRET_MASK = "****"


def mask_secrets(text: str, secrets: Iterable[str]) -> str:
    """Replace every occurrence of the given secret values with a mask.

    Longer secrets are replaced first so a secret that contains another
    is not left half-masked.
    """
    if not text:
        return text
    for secret in sorted({s for s in secrets if s}, key=len, reverse=True):
        text = text.replace(secret, SECRET_MASK)
    return text


def mask_email(email: str) -> str:
    """Keep the first character and the domain of an email address."""
    if not email or "@" not in email:
        return email
    local, domain = email.split("@", 1)
    return f"{local[:1]}***@{domain}"


def _mask_pii_regex(text: str) -> str:
    """Apply rule-based regex masking for common PII patterns.

    Masks:
    - Email addresses
    - Indonesian phone numbers (+62 / 62 / 08 prefixes)
    - Card numbers (16 digits with optional spaces/dashes)
    """
    text = re.sub(
        r'\b(?:\d{4}[-\s]?){3}\d{4}\b',
        '[REDACTED_CREDIT_CARD]',
        text
    )

    text = re.sub(
        r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b',
        '[REDACTED_EMAIL]',
        text
    )

    text = re.sub(
        r'(?:\+62|\b62|\b0)8\d{1,2}[-\s]?\d{3,4}[-\s]?\d{3,5}\b',
        '[REDACTED_PHONE]',
        text
    )

    return text


def _mask_pii_presidio(text: str) -> str:
    """Apply Microsoft Presidio-based PII detection and anonymization."""
    analyzer = _get_analyzer()
    anonymizer = _get_anonymizer()

    results: list[RecognizerResult] = analyzer.analyze(
        text=text,
        entities=ACCOUNT_ENTITIES,
        language="en",
    )

    if not results:
        return text

    operators = {
        "EMAIL_ADDRESS": OperatorConfig("replace", {"new_value": "[REDACTED_EMAIL]"}),
        "PHONE_NUMBER": OperatorConfig("replace", {"new_value": "[REDACTED_PHONE]"}),
        "PERSON": OperatorConfig("replace", {"new_value": "[REDACTED_PERSON]"}),
        "CREDIT_CARD": OperatorConfig("replace", {"new_value": "[REDACTED_CREDIT_CARD]"}),
        "IBAN_CODE": OperatorConfig("replace", {"new_value": "[REDACTED_IBAN]"}),
        "IP_ADDRESS": OperatorConfig("replace", {"new_value": "[REDACTED_IP]"}),
        "DEFAULT": OperatorConfig("replace", {"new_value": "[REDACTED]"}),
    }

    anonymized = anonymizer.anonymize(
        text=text,
        analyzer_results=results,
        operators=operators,
    )

    return anonymized.text


def mask_pii(text: str, use_presidio: bool = False) -> str:
    """Mask PII patterns in text.

    Regex masking always runs. Presidio runs afterwards when requested;
    it needs a spaCy English model installed.
    """
    if not text:
        return text

    masked_text = _mask_pii_regex(text)

    if use_presidio:
        masked_text = _mask_pii_presidio(masked_text)

    return masked_text


def redact_for_logging(data: dict) -> dict:
    """Redact sensitive fields from a dictionary for logging."""
    redacted = {}
    for key, value in data.items():
        lowered = str(key).lower()
        if any(field in lowered for field in ("password", "token", "pin", "apikey", "otp")) \
                or lowered in SENSITIVE_FIELDS:
            redacted[key] = "[REDACTED]"
        elif isinstance(value, dict):
            redacted[key] = redact_for_logging(value)
        elif isinstance(value, list):
            redacted[key] = [
                redact_for_logging(v) if isinstance(v, dict) else v
                for v in value
            ]
        else:
            redacted[key] = value

    return redacted
