#!/usr/bin/env python3
"""
export_answers.py - Write a reader's answers to PDF from the data directory.

Reads the stored progress snapshot from progress.db and renders the same
PDF the completion view offers for download.

Usage:
  python scripts/export_answers.py --output respostas.pdf
  python scripts/export_answers.py --user-id local --name "Maria Silva" --output respostas.pdf
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from guidedbook.classroom import CatalogError, ProgressStore, SQLiteStorage, build_report, load_catalog
from guidedbook.config import load_settings
from guidedbook.viewer import DEFAULT_FILENAME, render_report_pdf

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    settings = load_settings()

    parser = argparse.ArgumentParser(
        description="Export stored answers as a PDF",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=settings.storage_db_path,
        help="Path to progress.db"
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=settings.catalog_path,
        help="Path to catalog YAML"
    )
    parser.add_argument(
        "--user-id",
        default="local",
        help="Storage namespace of the reader"
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Reader name for the PDF header"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path(DEFAULT_FILENAME),
        help="Output PDF path"
    )

    args = parser.parse_args()

    if not args.db.exists():
        logger.error(f"Progress database not found: {args.db}")
        sys.exit(1)

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        logger.error(f"Invalid catalog: {e}")
        sys.exit(1)

    progress = ProgressStore(SQLiteStorage(args.db, user_id=args.user_id))
    report = build_report(catalog, progress)
    if report.is_empty:
        logger.warning(f"No answers stored for '{args.user_id}'")

    args.output.write_bytes(render_report_pdf(report, args.name))
    logger.info(f"Saved {report.answer_count} answers to: {args.output}")


if __name__ == "__main__":
    main()
