"""
Text normalizer: turns extracted page text into clean article prose.

Deterministic and side-effect-free. Running it twice gives the same text
as running it once.
"""

import re

# Interface chrome that leaks into article text on most news sites
BOILERPLATE_PHRASES = [
    "Skip to", "Jump to", "Go to", "Click here", "Read more", "Continue reading",
    "Share", "Tweet", "Facebook", "LinkedIn", "Pinterest", "Instagram",
    "Subscribe", "Newsletter", "Advertisement", "Sponsored", "Cookie",
    "Privacy Policy", "Terms of Service",
]

# Horizontal whitespace only; newlines are paragraph separators
INLINE_WHITESPACE = re.compile(r'[^\S\n]+')
SPACE_AROUND_NEWLINE = re.compile(r' *\n *')
EXCESS_NEWLINES = re.compile(r'\n{3,}')

BOILERPLATE_PATTERN = re.compile(
    r'\b(?:' + '|'.join(re.escape(p) for p in BOILERPLATE_PHRASES) + r')\b',
    re.IGNORECASE
)
EMAIL_PATTERN = re.compile(r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b')
PHONE_PATTERN = re.compile(r'\b\d{3}[-.]?\d{3}[-.]?\d{4}\b')

TITLE_PREFIX_LENGTH = 50


def _collapse_whitespace(text: str) -> str:
    text = INLINE_WHITESPACE.sub(' ', text)
    text = SPACE_AROUND_NEWLINE.sub('\n', text)
    return EXCESS_NEWLINES.sub('\n\n', text)


def normalize(raw_text: str, title: str = "") -> str:
    """
    Clean extracted article text.

    Args:
        raw_text: Text as pulled out of the page
        title: Page title; prepended when the text does not already start with it

    Returns:
        Normalized article text
    """
    text = _collapse_whitespace(raw_text)

    # Removing one phrase can butt two words into a new phrase
    # ("Click Share here"), so repeat until nothing changes.
    previous = None
    while text != previous:
        previous = text
        text = BOILERPLATE_PATTERN.sub('', text)
        text = EMAIL_PATTERN.sub('', text)
        text = PHONE_PATTERN.sub('', text)
        text = _collapse_whitespace(text)
    return prepend_title(text.strip(), title)


def prepend_title(text: str, title: str) -> str:
    """Put the title on top unless the text already contains its opening."""
    title = title.strip() if title else ""
    if not title or title.lower()[:TITLE_PREFIX_LENGTH] in text.lower():
        return text
    return f"{title}\n\n{text}" if text else title
