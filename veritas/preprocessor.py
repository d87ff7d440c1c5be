"""
String-level HTML cleanup applied before the document is parsed.

- Detects the declared charset from raw bytes (with WHATWG label mapping)
- Repairs the malformations that trip up parsers (NULL bytes, doubled
  angle brackets, control characters, mixed line endings)

Design principle: NEVER FAIL on bad HTML. Always produce usable output.
"""

import re
from typing import Optional

from .logger import get_module_logger

logger = get_module_logger("preprocessor")


class Preprocessor:
    """Rule-based HTML sanitizer."""

    # WHATWG encoding spec: browsers silently remap these charsets.
    # https://encoding.spec.whatwg.org/#names-and-labels
    # "iso-8859-1" is decoded as windows-1252 everywhere, so 0x80–0x9F become
    # curly quotes and dashes rather than control codes.
    WHATWG_CHARSET_MAP = {
        'iso-8859-1': 'windows-1252',
        'iso8859-1': 'windows-1252',
        'iso88591': 'windows-1252',
        'latin-1': 'windows-1252',
        'latin1': 'windows-1252',
        'us-ascii': 'windows-1252',
        'ascii': 'windows-1252',
        'iso-8859-9': 'windows-1254',
        'iso-8859-11': 'windows-874',
    }

    DOUBLE_BRACKET_PATTERN = re.compile(r'<{2,}(\/?[a-zA-Z][^>]*?)>{2,}')

    # Everything below 0x20 except tab, newline and carriage return
    CONTROL_CHARS = ''.join(chr(c) for c in range(32) if c not in (9, 10, 13))

    @staticmethod
    def map_charset(charset: str) -> str:
        """Apply the browser charset mapping to a declared label."""
        charset = charset.strip().strip('"\'').lower()
        return Preprocessor.WHATWG_CHARSET_MAP.get(charset, charset)

    @staticmethod
    def detect_charset_from_bytes(raw_bytes: bytes) -> Optional[str]:
        """
        Detect charset from raw HTML bytes by scanning the first 2048 bytes
        for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

        Returns the browser-equivalent charset, or None if nothing is declared.
        """
        # The HTML spec requires the declaration within the first 1024 bytes
        head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

        charset = None

        m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
        if m:
            charset = m.group(1)

        if not charset:
            m = re.search(
                r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
                head_str, re.IGNORECASE
            )
            if m:
                charset = m.group(1)

        if not charset:
            return None

        return Preprocessor.map_charset(charset)

    def sanitize(self, html: str) -> tuple[str, list[str]]:
        """
        Sanitize raw HTML string before parsing.

        Args:
            html: Raw HTML string

        Returns:
            Tuple of (sanitized HTML, list of warnings)
        """
        warnings = []

        # Lone surrogates from a bad decode would blow up later string handling
        sanitized = html.encode('utf-8', errors='replace').decode('utf-8')

        if '\x00' in sanitized:
            sanitized = sanitized.replace('\x00', '')
            warnings.append("Removed NULL bytes")

        # <<p>> from copy-paste corruption
        if self.DOUBLE_BRACKET_PATTERN.search(sanitized):
            sanitized = self.DOUBLE_BRACKET_PATTERN.sub(r'<\1>', sanitized)
            warnings.append("Fixed double angle brackets")

        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        if any(c in sanitized for c in self.CONTROL_CHARS):
            sanitized = sanitized.translate(str.maketrans('', '', self.CONTROL_CHARS))
            warnings.append("Removed control characters")

        if warnings:
            logger.debug(f"Sanitization applied: {', '.join(warnings)}")
        return sanitized, warnings
