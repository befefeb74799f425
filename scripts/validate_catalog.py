#!/usr/bin/env python3
"""
validate_catalog.py - Check a chapter catalog before shipping it.

Loads the YAML catalog through the same validation the reader uses and
reports chapter, block and answer-key counts.

Usage:
  python scripts/validate_catalog.py
  python scripts/validate_catalog.py --catalog path/to/course.yaml
"""

import argparse
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from guidedbook.classroom import CatalogError, load_catalog
from guidedbook.config import DEFAULT_CATALOG_PATH

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(
        description="Validate a GuidedBook chapter catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=DEFAULT_CATALOG_PATH,
        help="Path to catalog YAML"
    )

    args = parser.parse_args()

    try:
        catalog = load_catalog(args.catalog)
    except CatalogError as e:
        logger.error(f"Invalid catalog: {e}")
        sys.exit(1)

    logger.info("=" * 50)
    logger.info(f"Catalog: {catalog.title}")
    logger.info("=" * 50)
    for index, chapter in enumerate(catalog.chapters):
        required = len(chapter.required_blocks())
        optional = len(chapter.input_blocks()) - required
        logger.info(
            f"  {index + 1:2d}. {chapter.id:<12} {len(chapter.blocks):3d} blocks, "
            f"{required} required, {optional} optional"
        )
    logger.info(f"Chapters: {len(catalog)}")
    logger.info(f"Answer keys: {len(catalog.answer_keys())}")


if __name__ == "__main__":
    main()
