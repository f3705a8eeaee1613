from __future__ import annotations

import argparse
import os
from typing import List, Optional

from collabnet.config import (
    DEFAULT_SEED_PID,
    DEFAULT_OUT_DIR,
    DEFAULT_OUTPUT_FILE,
    DEFAULT_LOG_FILE,
    DBLP_HOST,
    MAX_DEPTH,
    PARALLELISM,
    REQUEST_DELAY,
    RANDOM_DELAY,
    ALLOW_URL_REVISIT,
)
from collabnet.crawler import CoauthorCrawler
from collabnet.engine import Collector
from collabnet.exceptions import FILE_IO_ERRORS, FILE_WRITE_ERRORS
from collabnet.io_utils import prepare_output, write_records_csv
from collabnet.log_utils import logger, LogCategory


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crawl DBLP person records into a co-authorship dataset (name, id, collaborators)."
    )
    parser.add_argument(
        "seeds", nargs="*", default=[DEFAULT_SEED_PID],
        help=f"DBLP pids or profile URLs to start from (default: {DEFAULT_SEED_PID})",
    )
    default_out = os.path.join(os.path.dirname(os.path.abspath(__file__)), DEFAULT_OUT_DIR)
    parser.add_argument("--out", default=os.path.join(default_out, DEFAULT_OUTPUT_FILE),
                        help="CSV file to write; replaced on every run")
    parser.add_argument("--log-file", default=os.path.join(default_out, DEFAULT_LOG_FILE),
                        help="Run log file")
    parser.add_argument("--max-depth", type=int, default=MAX_DEPTH,
                        help="Discovery hops followed from the seed")
    parser.add_argument("--parallelism", type=int, default=PARALLELISM,
                        help="Pages fetched at the same time")
    parser.add_argument("--delay", type=float, default=REQUEST_DELAY,
                        help="Fixed wait before each fetch, in seconds")
    parser.add_argument("--random-delay", type=float, default=RANDOM_DELAY,
                        help="Upper bound of the random wait added before each fetch, in seconds")
    parser.add_argument("--allow-revisit", action="store_true", default=ALLOW_URL_REVISIT,
                        help="Fetch a profile again each time it is rediscovered")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Prepare the output file and run log, crawl from the given seeds, and write
    the collected records to CSV.

    Returns 0 on success, 1 when the dataset could not be written, and 2 for
    setup failures that stop the run before any page is fetched.
    """
    args = build_parser().parse_args(argv)

    logger.set_log_file(args.log_file)
    logger.step("collabnet run started", category=LogCategory.PLAN)

    # seeds and settings are checked before the previous dataset is truncated
    try:
        collector = Collector(
            allowed_domains=(DBLP_HOST,),
            max_depth=args.max_depth,
            parallelism=args.parallelism,
            delay=args.delay,
            random_delay=args.random_delay,
            allow_revisit=args.allow_revisit,
        )
        crawler = CoauthorCrawler(collector)
        seed_urls = crawler.seed_urls(*args.seeds)
    except ValueError as e:
        logger.error(f"Invalid crawl setup: {e}", category=LogCategory.ERROR)
        logger.close()
        return 2

    try:
        prepare_output(args.out)
        logger.success(f"Output file ready: {args.out}", category=LogCategory.PLAN)
    except FILE_IO_ERRORS as e:
        logger.error(f"Cannot open output file '{args.out}': {e}", category=LogCategory.ERROR)
        logger.close()
        return 2

    records = crawler.crawl(*seed_urls)

    try:
        written = write_records_csv(records, args.out)
    except FILE_WRITE_ERRORS as e:
        logger.error(f"Failed to write dataset '{args.out}': {e}", category=LogCategory.ERROR)
        logger.close()
        return 1

    logger.step("Run complete", category=LogCategory.PLAN)
    logger.info(f"Authors written: {written}", category=LogCategory.SAVE)
    logger.info(f"Failed pages: {len(crawler.failures)}", category=LogCategory.PLAN)
    logger.info(f"Dataset: {args.out}", category=LogCategory.SAVE)
    logger.info(f"Log file: {logger.log_file_path or 'n/a'}", category=LogCategory.PLAN)

    logger.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
