#!/usr/bin/env python3
"""
CLI script to run only the content-acquisition half of the pipeline.

Fetches URLs (or reads saved HTML files), extracts and normalizes the article,
and prints what would be sent to the backend. No API key needed, no model call.
Useful for checking how a site's markup survives the selector cascade.

Usage:
    python run_extractor.py https://example.com/news/story
    python run_extractor.py saved_page.html -o extracted.json
"""

import argparse
import json
import sys
from pathlib import Path

from veritas.fetcher import HtmlFetcher, is_valid_url
from veritas.extractor import ArticleExtractor
from veritas.preprocessor import Preprocessor
from veritas.normalizer import normalize, prepend_title
from veritas.guards import ensure_extracted_length
from veritas.error_mapper import map_error
from veritas.exceptions import VeritasError


def main():
    parser = argparse.ArgumentParser(description="Extract article text from URLs or HTML files")
    parser.add_argument("inputs", nargs="+", help="Article URLs or saved HTML files")
    parser.add_argument("--output", "-o", help="Output JSON file")
    args = parser.parse_args()

    fetcher = HtmlFetcher()
    extractor = ArticleExtractor()

    results = []

    for item in args.inputs:
        print(f"Extracting: {item}", file=sys.stderr)

        try:
            if is_valid_url(item):
                html = fetcher.fetch(item).html
            else:
                # Same byte-level charset detection the fetcher falls back to
                raw_bytes = Path(item).read_bytes()
                charset = Preprocessor.detect_charset_from_bytes(raw_bytes) or "utf-8"
                html = raw_bytes.decode(charset, errors="replace")

            article = extractor.extract(html)
            body = ensure_extracted_length(normalize(article.body))
            text = prepend_title(body, article.title)

            results.append({
                "input": item,
                "status": "success",
                "title": article.title,
                "length": len(text),
                "text": text
            })
            print(f"  ✓ {len(text)} chars", file=sys.stderr)

        except VeritasError as e:
            response, status = map_error(e)
            results.append({"input": item, "status": "error", "error": response.error})
            print(f"  ✗ Error ({status}): {response.error}", file=sys.stderr)

        except OSError as e:
            results.append({"input": item, "status": "error", "error": str(e)})
            print(f"  ✗ Error: {e}", file=sys.stderr)

    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output)
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
