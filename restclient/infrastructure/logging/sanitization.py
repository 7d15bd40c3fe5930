"""
Redaction of credentials in request and response logging.

Payload and response logging put headers, URLs and bodies into log events.
Header values, query parameters and JSON fields whose names look like
credentials are replaced, and bearer/basic tokens or JWTs are scrubbed from
free text.
"""

import json
import re
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

MAX_DEPTH = 10

NAME_SEPARATOR = re.compile(r'[^a-z0-9]+')


class LogSanitizer:
    """Redacts credentials from headers, URLs and bodies."""

    # Matched as case-insensitive substrings of header, field and parameter names
    SENSITIVE_NAMES = frozenset({
        'password', 'passwd', 'secret', 'token', 'authorization',
        'api_key', 'apikey', 'api-key', 'private_key', 'cookie', 'credential',
    })

    # Too short to match inside other words; only whole name parts count
    SENSITIVE_NAME_PARTS = frozenset({'pwd', 'auth', 'session', 'sid'})

    SECRET_PATTERNS = (
        re.compile(r'\b(?:Bearer|Basic)\s+[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE),
        re.compile(r'\beyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]*'),
    )

    REPLACEMENT_TEXT = "***REDACTED***"

    @classmethod
    def is_sensitive_name(cls, name: Any) -> bool:
        lowered = str(name).lower()
        if any(marker in lowered for marker in cls.SENSITIVE_NAMES):
            return True
        return any(part in cls.SENSITIVE_NAME_PARTS for part in NAME_SEPARATOR.split(lowered))

    @classmethod
    def sanitize_text(cls, text: str) -> str:
        """Scrub tokens that appear inside free text."""
        for pattern in cls.SECRET_PATTERNS:
            text = pattern.sub(cls.REPLACEMENT_TEXT, text)
        return text

    @classmethod
    def sanitize_value(cls, value: Any, depth: int = 0) -> Any:
        """Recursively redact sensitive keys in mappings and lists."""
        if depth >= MAX_DEPTH:
            return "<max depth>"
        if isinstance(value, Mapping):
            return {
                key: cls.REPLACEMENT_TEXT if cls.is_sensitive_name(key) else cls.sanitize_value(item, depth + 1)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [cls.sanitize_value(item, depth + 1) for item in value]
        if isinstance(value, str):
            return cls.sanitize_text(value)
        return value

    @classmethod
    def sanitize_headers(cls, headers: Mapping[str, str]) -> Dict[str, str]:
        return cls.sanitize_value(dict(headers))

    @classmethod
    def sanitize_url(cls, url: str) -> str:
        """
        Hide userinfo and sensitive query parameter values.

        The query is rewritten pair by pair so the rest of the URL stays
        byte-for-byte what was sent.
        """
        parts = urlsplit(url)
        netloc = parts.netloc
        if "@" in netloc:
            netloc = "***:***@" + netloc.rsplit("@", 1)[1]

        pairs = []
        for pair in parts.query.split("&") if parts.query else []:
            name, sep, value = pair.partition("=")
            if sep and cls.is_sensitive_name(name):
                value = cls.REPLACEMENT_TEXT
            pairs.append(f"{name}{sep}{value}")

        return urlunsplit((parts.scheme, netloc, parts.path, "&".join(pairs), parts.fragment))

    @classmethod
    def sanitize_body(cls, body: Optional[str]) -> Optional[str]:
        """Redact a request or response body, field by field when it is JSON."""
        if not body:
            return body
        try:
            document = json.loads(body)
        except ValueError:
            return cls.sanitize_text(body)
        if isinstance(document, (dict, list)):
            return json.dumps(cls.sanitize_value(document), ensure_ascii=False)
        return cls.sanitize_text(body)


class StructlogSanitizer:
    """Structlog processor applying ``LogSanitizer`` to every event."""

    BODY_KEYS = ('payload', 'body')

    def __init__(self, sanitizer: Optional[LogSanitizer] = None):
        self.sanitizer = sanitizer or LogSanitizer()

    def __call__(self, logger, method_name, event_dict):
        try:
            sanitized = {}
            for key, value in event_dict.items():
                if key == 'url' and isinstance(value, str):
                    sanitized[key] = self.sanitizer.sanitize_url(value)
                elif key in self.BODY_KEYS and isinstance(value, str):
                    sanitized[key] = self.sanitizer.sanitize_body(value)
                elif self.sanitizer.is_sensitive_name(key):
                    sanitized[key] = self.sanitizer.REPLACEMENT_TEXT
                else:
                    sanitized[key] = self.sanitizer.sanitize_value(value)
            return sanitized
        except Exception as e:
            # Drop the event rather than log it unredacted
            return {
                "event": "log_sanitization_error",
                "error": type(e).__name__,
            }
