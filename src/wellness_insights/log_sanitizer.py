"""Log redaction for credentials and journal text.

Journal entries and the AI replies about them are private free text. This
filter strips them from log records together with API keys, bearer tokens
and email addresses before any handler writes the record.

Usage:
    from wellness_insights.log_sanitizer import install_log_sanitizer

    install_log_sanitizer()
"""

import logging
import re
from typing import Any, List, Optional, Tuple

# Quoted free-text fields: content="...", "journalEntry": "..."
_TEXT_FIELDS = r'(?:content|journalEntry|journal_entry|supportiveResponse|supportive_response)'


class LogSanitizationFilter(logging.Filter):
    """Logging filter that redacts sensitive values from log messages."""

    # More specific patterns come first
    PATTERNS: List[Tuple[re.Pattern, str]] = [
        # Journal text as a quoted value, JSON or keyword style
        (re.compile(r'(' + _TEXT_FIELDS + r'["\']?\s*[:=]\s*)"(?:[^"\\]|\\.)*"', re.IGNORECASE), r'\1"[REDACTED_TEXT]"'),
        (re.compile(r"(" + _TEXT_FIELDS + r"[\"']?\s*[:=]\s*)'(?:[^'\\]|\\.)*'", re.IGNORECASE), r"\1'[REDACTED_TEXT]'"),
        # Unquoted value runs to the next comma or closing bracket
        (re.compile(r'(' + _TEXT_FIELDS + r'\s*=\s*)(?!["\'\[])[^,)}\]]+', re.IGNORECASE), r'\1[REDACTED_TEXT]'),

        # OpenAI-style API keys (sk-...)
        (re.compile(r'\bsk-[a-zA-Z0-9_-]{20,}'), '[REDACTED_API_KEY]'),

        # JWT tokens, before Bearer
        (re.compile(r'\beyJ[a-zA-Z0-9_-]+\.eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+'), '[REDACTED_JWT]'),

        # Bearer tokens in Authorization headers
        (re.compile(r'Bearer\s+[a-zA-Z0-9_\-\.]+', re.IGNORECASE), 'Bearer [REDACTED_TOKEN]'),

        # Key and token fields
        (re.compile(r'(api_key["\']?\s*[:=]\s*["\']?)[^"\'&\s,]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(apikey["\']?\s*[:=]\s*["\']?)[^"\'&\s,]+', re.IGNORECASE), r'\1[REDACTED]'),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)[^"\'&\s,]+', re.IGNORECASE), r'\1[REDACTED]'),

        # Email addresses
        (re.compile(r'\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b'), '[REDACTED_EMAIL]'),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        """Sanitize the record in place; never drops it."""
        if record.msg:
            record.msg = self._sanitize(str(record.msg))
        if record.args:
            record.args = self._sanitize_args(record.args)
        return True

    def _sanitize(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def _sanitize_args(self, args: Any) -> Any:
        if isinstance(args, str):
            return self._sanitize(args)
        elif isinstance(args, tuple):
            return tuple(self._sanitize_args(arg) for arg in args)
        elif isinstance(args, list):
            return [self._sanitize_args(arg) for arg in args]
        elif isinstance(args, dict):
            return {k: self._sanitize_args(v) for k, v in args.items()}
        else:
            str_val = str(args)
            sanitized = self._sanitize(str_val)
            # Keep numbers and other primitives intact unless something was redacted
            return sanitized if sanitized != str_val else args


def install_log_sanitizer(logger_name: Optional[str] = None) -> None:
    """Install the filter on one logger, or on the root logger and its handlers."""
    sanitizer = LogSanitizationFilter()

    if logger_name:
        logging.getLogger(logger_name).addFilter(sanitizer)
        return

    root_logger = logging.getLogger()
    if not any(isinstance(f, LogSanitizationFilter) for f in root_logger.filters):
        root_logger.addFilter(sanitizer)
    for handler in root_logger.handlers:
        if not any(isinstance(f, LogSanitizationFilter) for f in handler.filters):
            handler.addFilter(sanitizer)


def sanitize_string(text: str) -> str:
    """Sanitize a string outside the logging system, e.g. an error detail."""
    return LogSanitizationFilter()._sanitize(text)
