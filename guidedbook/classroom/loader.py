"""
Catalog loader - Load the course catalog from a YAML file.

The catalog is authored as YAML and validated into immutable Pydantic
models. Validation covers block shapes, chapter id uniqueness and
global answer-key uniqueness; any failure raises CatalogError.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from guidedbook.config import DEFAULT_CATALOG_PATH
from guidedbook.schemas import Catalog


logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a catalog file is missing, unparsable or invalid."""


def parse_catalog(raw: Any, source: str = "<memory>") -> Catalog:
    """
    Validate raw catalog data.

    Args:
        raw: Parsed YAML/JSON structure
        source: Name used in error messages

    Returns:
        Validated Catalog

    Raises:
        CatalogError: If the data does not describe a valid catalog
    """
    if not isinstance(raw, dict):
        raise CatalogError(f"Catalog {source} must be a mapping at the top level")

    try:
        catalog = Catalog.model_validate(raw)
    except ValidationError as e:
        raise CatalogError(f"Invalid catalog {source}: {e}") from e

    for chapter in catalog.chapters:
        for block in chapter.required_blocks():
            if not block.id:
                logger.warning(
                    f"Chapter '{chapter.id}' has a required {block.type} block without id; "
                    "it will not gate completion"
                )
    return catalog


def load_catalog(path: Optional[Path] = None) -> Catalog:
    """
    Load a catalog file.

    Args:
        path: YAML file (default: bundled guidedbook/content/course.yaml)

    Raises:
        CatalogError: If the file is missing or invalid
    """
    file_path = Path(path) if path else DEFAULT_CATALOG_PATH
    if not file_path.exists():
        raise CatalogError(f"Catalog not found: {file_path}")

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogError(f"Could not parse catalog {file_path}: {e}") from e

    catalog = parse_catalog(raw, source=str(file_path))
    logger.info(
        f"Loaded catalog '{catalog.title}': {len(catalog)} chapters, "
        f"{len(catalog.answer_keys())} answer keys"
    )
    return catalog
