"""
Rule-based article extractor.

Turns a fetched HTML page into a best-effort (title, body) pair.

Pipeline position: between the fetcher and the normalizer.
Input:  decoded HTML string
Output: ExtractedArticle (never fails; the length gate runs after normalization)

Order of operations:
  1. Strip boilerplate containers (nav, ads, share widgets, comments, ...)
  2. Read the title
  3. Try JSON-LD structured data (articleBody / text)
  4. Run the selector cascade, most specific container first
  5. Fall back to the whole <body> with a broader denylist
"""

import json
import re
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup, Comment, Tag

from .preprocessor import Preprocessor
from .schemas import ExtractedArticle
from .logger import get_module_logger

logger = get_module_logger("extractor")

# A candidate of this length ends the search
MIN_CANDIDATE_LENGTH = 200

# Below this, the collected paragraph text is discarded in favour of the
# container's full text
MIN_PARAGRAPH_TEXT_LENGTH = 100

JSON_LD_SELECTOR = 'script[type="application/ld+json"]'

# Removed before any text is read. JSON-LD scripts survive until step 3 has read them.
NOISE_SELECTORS = [
    'script:not([type="application/ld+json"])', 'style', 'noscript', 'template', 'iframe',
    'nav', 'header', 'footer', 'aside',
    '.advertisement', '.ads', '.social-share', '.comments', '.sidebar', '.menu',
    '.navigation', '.breadcrumb', '.related-articles', '.newsletter', '.popup', '.modal',
    '[class*="ad-"]', '[id*="ad-"]', '[class*="social"]', '[class*="share"]',
    '[class*="comment"]',
]

# Only applied when falling back to the whole body
BODY_NOISE_SELECTORS = [
    'script', 'nav', 'header', 'footer', 'aside', '.menu', '.navigation', '.sidebar',
    '.widget', '.advertisement', '.social', '.share', '.comment', '.related',
    '.recommended', '.newsletter', '.subscription', '.popup', '.modal', '.overlay',
]

# Content containers in priority order: semantic elements, CMS classes,
# news-site BEM classes, generic containers
CONTENT_SELECTORS = [
    'article',
    '[role="main"]',
    'main article',
    '.article-content',
    '.post-content',
    '.entry-content',
    '.article-body',
    '.post-body',
    '.content-body',
    '.story-body',
    '.article-text',
    '.article__content',
    '.story__content',
    '.post__content',
    '.content__body',
    '.content',
    '#content',
    'main',
    '.main-content',
    '.container .content',
    '.wrapper .content',
]

# Descendants that own the text collected inside a container (plus a <span> with no block around it)
BLOCK_TAGS = ['p', 'div', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# Elements that end a line when the tree is flattened to text
LINE_BREAK_TAGS = ['p', 'div', 'section', 'article', 'main', 'li', 'tr', 'blockquote',
                   'figcaption', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'pre', 'table', 'ul', 'ol']

HIDDEN_PATTERNS = [
    re.compile(r'display\s*:\s*none', re.IGNORECASE),
    re.compile(r'visibility\s*:\s*hidden', re.IGNORECASE),
]


def _is_hidden(elem: Tag) -> bool:
    style = elem.get('style', '')
    return bool(style) and any(p.search(style) for p in HIDDEN_PATTERNS)


def _remove(soup: BeautifulSoup, selectors: Sequence[str]) -> int:
    """Detach every element matched by `selectors`. Returns how many were removed."""
    removed = 0
    for selector in selectors:
        try:
            matches = soup.select(selector)
        except Exception as e:
            logger.warning(f"Invalid CSS '{selector}': {e}")
            continue
        for elem in matches:
            # extract() is safe on elements already detached with an ancestor
            elem.extract()
            removed += 1
    return removed


def _collect_block_text(container: Tag) -> str:
    """
    Join the text of the container's paragraph/heading/block descendants.

    Every string belongs to its nearest enclosing block, so a <div> holding
    loose lead text and nested <p>s yields each piece once, in document order.
    A <span> owns its text only when no block encloses it. Text sitting
    directly in the container is left out.
    """
    segments = []  # [owner, pieces]
    for string in container.find_all(string=True):
        owner = _text_owner(string, container)
        if owner is None:
            continue
        if segments and segments[-1][0] is owner:
            segments[-1][1].append(str(string))
        else:
            segments.append([owner, [str(string)]])

    texts = ("".join(pieces).strip() for _owner, pieces in segments)
    return "\n".join(text for text in texts if text)


def _text_owner(string, container: Tag) -> Optional[Tag]:
    """Nearest block ancestor of `string` inside `container`, else the nearest <span>."""
    span = None
    for parent in string.parents:
        if parent is container:
            break
        if parent.name in BLOCK_TAGS:
            return parent
        if span is None and parent.name == 'span':
            span = parent
    return span


class SelectorStrategy:
    """
    One step of the selector cascade: read the first element matching `selector`.

    Returns None when nothing matches.
    """

    def __init__(self, selector: str):
        self.selector = selector

    def __call__(self, soup: BeautifulSoup) -> Optional[str]:
        try:
            element = soup.select_one(self.selector)
        except Exception as e:
            logger.warning(f"Invalid CSS '{self.selector}': {e}")
            return None
        if element is None:
            return None

        text = _collect_block_text(element).strip()
        if len(text) < MIN_PARAGRAPH_TEXT_LENGTH:
            text = element.get_text().strip()
        return text

    def __repr__(self) -> str:
        return f"SelectorStrategy({self.selector!r})"


DEFAULT_STRATEGIES: tuple[Callable[[BeautifulSoup], Optional[str]], ...] = tuple(
    SelectorStrategy(selector) for selector in CONTENT_SELECTORS
)


class ArticleExtractor:
    """Extracts the article title and body from an HTML page."""

    def __init__(
        self,
        strategies: Sequence[Callable[[BeautifulSoup], Optional[str]]] = DEFAULT_STRATEGIES,
        preprocessor: Optional[Preprocessor] = None
    ):
        self.strategies = tuple(strategies)
        self.preprocessor = preprocessor or Preprocessor()

    def extract(self, html: str) -> ExtractedArticle:
        """
        Extract a best-effort article from HTML.

        Args:
            html: Decoded HTML document

        Returns:
            ExtractedArticle; body may be short or empty, never an error
        """
        sanitized, _warnings = self.preprocessor.sanitize(html)
        soup = self._parse(sanitized)

        # --- Step 1: strip chrome before any text is read ---
        removed = self._remove_noise(soup)
        logger.debug(f"Removed {removed} boilerplate elements")
        self._mark_line_breaks(soup)

        # --- Step 2: title ---
        title = self._extract_title(soup)

        # --- Step 3: JSON-LD structured data ---
        best = self._extract_json_ld(soup) or ""
        _remove(soup, [JSON_LD_SELECTOR])
        if best:
            logger.info(f"JSON-LD article body: {len(best)} chars")

        # --- Step 4: selector cascade ---
        if len(best) < MIN_CANDIDATE_LENGTH:
            for strategy in self.strategies:
                candidate = strategy(soup)
                if not candidate:
                    continue
                if len(candidate) > len(best):
                    best = candidate
                if len(candidate) > MIN_CANDIDATE_LENGTH:
                    logger.info(f"Selector {strategy!r} matched {len(candidate)} chars")
                    best = candidate
                    break

        # --- Step 5: whole-body fallback ---
        if len(best) < MIN_CANDIDATE_LENGTH:
            logger.info("No content container reached the threshold, using body text")
            _remove(soup, BODY_NOISE_SELECTORS)
            body = soup.find('body')
            body_text = body.get_text().strip() if body else ""
            if len(body_text) > len(best):
                best = body_text

        return ExtractedArticle(title=title, body=best)

    def _parse(self, html: str) -> BeautifulSoup:
        # html5lib follows the WHATWG algorithm and copes with the worst markup;
        # html.parser is the always-available fallback.
        try:
            return BeautifulSoup(html, 'html5lib')
        except Exception as e:
            logger.warning(f"html5lib parsing failed, using html.parser: {e}")
            return BeautifulSoup(html, 'html.parser')

    def _remove_noise(self, soup: BeautifulSoup) -> int:
        removed = _remove(soup, NOISE_SELECTORS)

        for elem in soup.find_all(style=True):
            if _is_hidden(elem):
                elem.extract()
                removed += 1

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        return removed

    def _mark_line_breaks(self, soup: BeautifulSoup) -> None:
        """Put newlines where block elements end so flattened text keeps paragraphs."""
        for br in soup.find_all('br'):
            br.replace_with('\n')
        for elem in soup.find_all(LINE_BREAK_TAGS):
            elem.append('\n')

    def _extract_title(self, soup: BeautifulSoup) -> str:
        if soup.title and soup.title.get_text().strip():
            return soup.title.get_text().strip()
        h1 = soup.find('h1')
        return h1.get_text().strip() if h1 else ""

    def _extract_json_ld(self, soup: BeautifulSoup) -> Optional[str]:
        """Read articleBody/text from the first JSON-LD block, if it has one."""
        script = soup.select_one(JSON_LD_SELECTOR)
        if script is None:
            return None

        try:
            data = json.loads(script.string or script.get_text() or "{}")
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Ignoring unparseable JSON-LD block: {e}")
            return None

        for node in self._json_ld_nodes(data):
            body = node.get("articleBody") or node.get("text")
            if isinstance(body, str) and body.strip():
                return body
        return None

    def _json_ld_nodes(self, data) -> list[dict]:
        # A block can be one object, a list of objects, or an object with @graph
        if isinstance(data, list):
            return [item for item in data if isinstance(item, dict)]
        if isinstance(data, dict):
            graph = data.get("@graph")
            nodes = [data]
            if isinstance(graph, list):
                nodes.extend(item for item in graph if isinstance(item, dict))
            return nodes
        return []


def extract_article(html: str) -> ExtractedArticle:
    """Convenience function to extract an article from HTML."""
    return ArticleExtractor().extract(html)
