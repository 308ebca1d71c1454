from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .build import run_build
from .config import SOURCE_KEYS, Settings

logger = logging.getLogger("policy_pulse")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="policy-pulse",
        description="Fetch state-media feeds, summarize them and build the static report.",
    )
    p.add_argument("--archive-dir", type=Path, help="Directory of dated JSON archives")
    p.add_argument("--output-dir", type=Path, help="Directory for the generated pages")
    p.add_argument("--source", dest="sources", action="append", choices=SOURCE_KEYS,
                   help="Only fetch this source (repeatable)")
    p.add_argument("--provider", choices=["deepseek", "openai", "gemini", "none"],
                   help="Summarizer backend; 'none' disables summaries")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    settings = Settings.from_env(
        archive_dir=args.archive_dir,
        output_dir=args.output_dir,
        provider=args.provider,
        source_keys=tuple(args.sources) if args.sources else None,
    )
    try:
        result = run_build(settings)
    except Exception:
        logger.exception("Build failed")
        return 1
    logger.info("Build complete: %s (%d reports in history)", result.date, len(result.history))
    return 0


if __name__ == "__main__":
    sys.exit(main())
