# alexa_prune/cli.py
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger
from pydantic import ValidationError

from .config import load_settings
from .deletion import DeletionOrchestrator
from .logging_setup import configure_logging
from .pipeline import run_pipeline
from .report import summarize
from .snapshots import SnapshotError, SnapshotSource
from .transport import AlexaTransport, TransportTimeout


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="alexa-prune",
        description="Delete Alexa smart-home devices whose description/manufacturer matches a phrase.",
    )
    ap.add_argument("--debug", action="store_true", default=None,
                    help="Log raw status codes and response bodies")
    ap.add_argument("--sleep", dest="should_sleep", action="store_true", default=None,
                    help="Pause briefly between delete requests")
    ap.add_argument("--filter-text", default=None,
                    help="Phrase to match (default: 'Home Assistant')")
    ap.add_argument("--snapshot-dir", type=Path, default=None,
                    help="Where data.json / graphql.json are written")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            debug=args.debug,
            should_sleep=args.should_sleep,
            filter_text=args.filter_text,
            snapshot_dir=args.snapshot_dir,
        )
    except ValidationError as e:
        configure_logging()
        logger.error("Invalid settings: {}", e)
        return 1

    try:
        configure_logging(debug=settings.debug, log_dir=settings.log_dir)
    except OSError as e:
        logger.error("Cannot write logs to {}: {}", settings.log_dir, e)
        return 1

    try:
        with AlexaTransport(settings) as transport:
            source = SnapshotSource(transport, settings)
            orchestrator = DeletionOrchestrator(transport, settings)
            report = run_pipeline(settings, source, orchestrator)
    except TransportTimeout as e:
        logger.error("Request timed out: {}", e)
        return 1
    except SnapshotError as e:
        logger.error("Snapshot unusable: {}", e)
        return 1
    except Exception as e:
        if settings.debug:
            logger.exception("An error occurred: {}", e)
        else:
            logger.error("An error occurred: {}", e)
        return 1

    for line in summarize(report, settings.filter_text):
        logger.info(line)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
