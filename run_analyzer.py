#!/usr/bin/env python3
"""
Command-line script to run a full authenticity analysis.

Each input is either a URL (fetched and extracted) or a path to a text file
(analyzed as-is). Results are printed as JSON, one entry per input, using the
same {error} shape the HTTP endpoint returns on failure.

Usage:
    python run_analyzer.py https://example.com/news/story
    python run_analyzer.py article.txt --source-url https://example.com/story
    python run_analyzer.py article.txt https://example.com/story -o results.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from veritas.config import Settings
from veritas.main import VerificationPipeline
from veritas.fetcher import is_valid_url
from veritas.schemas import tier_for_confidence
from veritas.logger import setup_logger


def main():
    parser = argparse.ArgumentParser(
        description="Analyze news articles for authenticity"
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Article URLs or paths to text files"
    )
    parser.add_argument(
        "--source-url", "-s",
        help="Source URL to cite for text-file inputs"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output file for results (default: print to stdout)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )
    parser.add_argument(
        "--log-file",
        help="Also write log lines to this file"
    )

    args = parser.parse_args()

    settings = Settings.from_env()
    if args.verbose:
        settings = settings.model_copy(update={"log_level": logging.DEBUG})
    setup_logger(level=settings.log_level, log_file=args.log_file)

    pipeline = VerificationPipeline(settings=settings)
    results = []

    for item in args.inputs:
        print(f"Analyzing: {item}", file=sys.stderr)

        if is_valid_url(item):
            payload = {"url": item}
        else:
            path = Path(item)
            if not path.is_file():
                results.append({"input": item, "status": 400, "error": "Not a URL or readable file"})
                print("  ✗ Not a URL or readable file", file=sys.stderr)
                continue
            payload = {"text": path.read_text(errors="replace"), "url": args.source_url}

        body, status = pipeline.handle(payload)
        results.append({"input": item, "status": status, **body})

        if status == 200:
            print(
                f"  ✓ {body['verdict']} ({body['confidence']}%, "
                f"scale: {tier_for_confidence(body['confidence'])})",
                file=sys.stderr
            )
        else:
            print(f"  ✗ Error ({status}): {body['error']}", file=sys.stderr)

    output_json = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output_json)
        print(f"\nResults saved to: {args.output}", file=sys.stderr)
    else:
        print(output_json)

    if any(r["status"] != 200 for r in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
