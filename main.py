"""
Export the progress payload as JSON.

Usage: python main.py --output progress.json [--timezone Europe/Vienna]
"""

import argparse
import json
import logging
import sys

from data_processing import SnapshotError, process_data
from supabase_client import StoreError, SupabaseRepository
from utils import get_log_level, get_timezone

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the boulder progress payload and write it as JSON.")
    parser.add_argument('--output', '-o', default='progress.json',
                        help="Output file, '-' for stdout (default: progress.json)")
    parser.add_argument('--timezone', default=None,
                        help="IANA timezone for calendar days (default: PROGRESS_TIMEZONE or UTC)")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    logging.basicConfig(level=get_log_level(), format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    args = parse_args(argv)

    try:
        repository = SupabaseRepository.from_env()
        payload = process_data(repository, tz=get_timezone(args.timezone))
    except (StoreError, SnapshotError) as e:
        logger.error("Could not build progress payload: %s", e)
        return 1

    text = json.dumps(payload.to_dict(), indent=2, ensure_ascii=False)
    if args.output == '-':
        sys.stdout.write(text + '\n')
    else:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text)
        logger.info("Wrote progress payload to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
