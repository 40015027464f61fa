"""
Log record sanitization.

Keeps signing keys and bearer tokens out of logs, exception messages and
debug output.
"""

import logging
import re


class CredentialRedactionFilter(logging.Filter):
    """
    Security filter that redacts credentials from log messages.

    - Redacts "privateKey" / "private_key" field values
    - Redacts PEM private key blocks (raw or JSON-escaped)
    - Redacts bearer tokens and bare JWTs

    Usage:
        >>> handler = logging.StreamHandler()
        >>> handler.addFilter(CredentialRedactionFilter())
        >>> logger.addHandler(handler)
    """

    # Keep the prefix (privateKey=) and replace the value
    PRIVATE_KEY_FIELD_PATTERN = re.compile(
        r'((?:privateKey|private_key)["\']?\s*[:=]\s*)("[^"]*"|\'[^\']*\'|\S+)'
    )
    PEM_PATTERN = re.compile(
        r'-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----',
        re.DOTALL
    )
    BEARER_PATTERN = re.compile(r'(Bearer\s+)[A-Za-z0-9._~+/=-]+')
    JWT_PATTERN = re.compile(r'eyJ[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+\.[A-Za-z0-9_-]+')

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact credentials from log record.

        Args:
            record: Log record to filter

        Returns:
            Always True (record is never filtered out, just sanitized)
        """
        # Redact the merged message rather than the template
        if record.args:
            record.msg = self.redact(record.getMessage())
            record.args = ()
        elif record.msg:
            record.msg = self.redact(str(record.msg))

        if record.exc_text:
            record.exc_text = self.redact(record.exc_text)

        return True

    def redact(self, text: str) -> str:
        """
        Redact all credential patterns from text.

        Args:
            text: Text to redact

        Returns:
            Text with credentials redacted
        """
        if not text:
            return text

        text = self.PRIVATE_KEY_FIELD_PATTERN.sub(r'\1[REDACTED]', text)
        text = self.PEM_PATTERN.sub('[REDACTED PRIVATE KEY]', text)
        text = self.BEARER_PATTERN.sub(r'\1[REDACTED]', text)
        text = self.JWT_PATTERN.sub('[REDACTED JWT]', text)

        return text
