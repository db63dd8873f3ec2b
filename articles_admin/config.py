"""
Configuration management for the Articles Admin dashboard.
Loads environment variables and provides access to configuration settings.
"""
import logging
import os
from typing import Optional
from dotenv import load_dotenv

# Configure logging
logger = logging.getLogger(__name__)

LISTING_LAYOUTS = ("cards", "list", "table")


def _as_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


class Config:
    """Configuration settings loaded from environment variables."""

    def __init__(self):
        """Initialize configuration by loading environment variables."""
        load_dotenv()

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a configuration value by key.

        Args:
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return os.getenv(key, default)

    @property
    def articles_api_base_url(self) -> str:
        """Get the articles REST service base URL (no trailing slash)."""
        return os.getenv("ARTICLES_API_BASE_URL", "http://localhost:8081/api").rstrip("/")

    @property
    def media_base_url(self) -> str:
        """Get the host that relative photo URLs are resolved against."""
        return os.getenv("MEDIA_BASE_URL", "http://localhost:8081").rstrip("/")

    @property
    def dashboard_port(self) -> int:
        """Get dashboard server port."""
        return int(os.getenv("DASHBOARD_PORT", "5000"))

    @property
    def dashboard_host(self) -> str:
        """Get dashboard server host."""
        return os.getenv("DASHBOARD_HOST", "127.0.0.1")

    @property
    def mock_backend_port(self) -> int:
        """Get the development articles backend port."""
        return int(os.getenv("MOCK_BACKEND_PORT", "8081"))

    @property
    def mock_upload_dir(self) -> str:
        """Get the directory the development articles backend stores uploads in."""
        return os.getenv("MOCK_UPLOAD_DIR", "uploads")

    @property
    def listing_layout(self) -> str:
        """
        Get the article listing layout.

        One of 'cards', 'list' or 'table'. Unknown values fall back to 'table'.
        """
        layout = os.getenv("LISTING_LAYOUT", "table").lower()
        if layout not in LISTING_LAYOUTS:
            logger.warning("Unknown LISTING_LAYOUT %r, using 'table'", layout)
            return "table"
        return layout

    @property
    def confirm_edits(self) -> bool:
        """Check if editing an article asks for confirmation first."""
        return _as_bool(os.getenv("CONFIRM_EDITS", "true"))

    @property
    def notifications_enabled(self) -> bool:
        """Check if success notifications are shown."""
        return _as_bool(os.getenv("NOTIFICATIONS_ENABLED", "true"))

    @property
    def lightbox_enabled(self) -> bool:
        """Check if photos open in the preview lightbox."""
        return _as_bool(os.getenv("LIGHTBOX_ENABLED", "true"))

    @property
    def photo_preview_limit(self) -> int:
        """
        Get how many photos a listing row shows before the '+N' suffix.

        0 shows every photo. Invalid or negative values fall back to 3.
        """
        try:
            limit = int(os.getenv("PHOTO_PREVIEW_LIMIT", "3"))
        except ValueError:
            return 3
        return limit if limit >= 0 else 3
