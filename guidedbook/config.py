"""
Runtime configuration for GuidedBook.

Settings come from environment variables, optionally loaded from a
.env file at the project root.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = Path(__file__).parent

DEFAULT_DATA_DIR = Path.home() / ".guidedbook"
DEFAULT_CATALOG_PATH = PACKAGE_DIR / "content" / "course.yaml"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Storage keys (kept stable so existing reader data survives upgrades)
PROGRESS_STORAGE_KEY = "ebook_reprogram_mind_data"
ACTIVE_CHAPTER_KEY = "ebook_active_chapter_id"
RECOVERY_PENDING_KEY = "supabase_recovery_pending"


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    catalog_path: Path
    log_level: str = "INFO"
    illustrations_enabled: bool = True
    webhook_token: Optional[str] = None

    @property
    def storage_db_path(self) -> Path:
        return self.data_dir / "progress.db"

    @property
    def accounts_db_path(self) -> Path:
        return self.data_dir / "accounts.db"


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build settings from the environment.

    Args:
        env_file: Optional .env path (default: PROJECT_ROOT/.env)

    Returns:
        Settings with defaults applied for unset variables
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    data_dir = os.environ.get("GUIDEDBOOK_DATA_DIR")
    catalog_path = os.environ.get("GUIDEDBOOK_CATALOG_PATH")
    token = os.environ.get("HOTMART_WEBHOOK_TOKEN")

    return Settings(
        data_dir=Path(data_dir).expanduser() if data_dir else DEFAULT_DATA_DIR,
        catalog_path=Path(catalog_path).expanduser() if catalog_path else DEFAULT_CATALOG_PATH,
        log_level=os.environ.get("GUIDEDBOOK_LOG_LEVEL", "INFO").upper(),
        illustrations_enabled=_env_flag("GUIDEDBOOK_ILLUSTRATIONS", True),
        webhook_token=token or None,
    )


def configure_logging(level: str = "INFO"):
    """Configure root logging once for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
