"""
View model for the articles dashboard.

Owns the form draft, the modal visibility flags and the transient
notifications. Every mutation goes through ArticlesAPI and is followed by
a full ArticleStore.fetch_all(); nothing is patched locally.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from articles_admin.article_store import ArticleStore
from articles_admin.articles_api import ArticlesAPI, PhotoFile
from articles_admin.config import Config, LISTING_LAYOUTS

logger = logging.getLogger(__name__)

# Failures a REST call can end in, from transport errors to malformed bodies
REQUEST_ERRORS = (requests.RequestException, ValueError)


@dataclass
class DashboardFeatures:
    """Switches for the optional parts of the dashboard."""

    confirm_edits: bool = True
    notifications: bool = True
    lightbox: bool = True
    listing: str = "table"
    photo_limit: int = 3

    def __post_init__(self):
        if self.listing not in LISTING_LAYOUTS:
            raise ValueError(f"listing must be one of {LISTING_LAYOUTS}, got {self.listing!r}")
        if self.photo_limit < 0:
            raise ValueError("photo_limit must not be negative")

    @classmethod
    def from_config(cls, config: Config) -> "DashboardFeatures":
        """Build the feature set from environment configuration."""
        return cls(
            confirm_edits=config.confirm_edits,
            notifications=config.notifications_enabled,
            lightbox=config.lightbox_enabled,
            listing=config.listing_layout,
            photo_limit=config.photo_preview_limit,
        )


@dataclass
class FormDraft:
    """Unsaved create/edit form state."""

    title: str = ""
    summary: str = ""
    content: str = ""
    photos: List[PhotoFile] = field(default_factory=list)


class DashboardView:
    """State and actions behind the articles dashboard page."""

    def __init__(
        self,
        store: ArticleStore,
        articles_api: ArticlesAPI,
        media_base_url: str,
        features: Optional[DashboardFeatures] = None
    ):
        """
        Initialize the view.

        Args:
            store: Article store to read from and refresh
            articles_api: Client for create/update/delete
            media_base_url: Host that relative photo URLs resolve against
            features: Optional feature switches (defaults to everything on)
        """
        self.store = store
        self.articles_api = articles_api
        self.media_base_url = media_base_url.rstrip("/")
        self.features = features or DashboardFeatures()

        self.mounted = False
        self.draft: Optional[FormDraft] = None
        self.editing_id: Optional[int] = None
        self.modal_open = False
        self.delete_target_id: Optional[int] = None
        self.edit_target_id: Optional[int] = None
        self.preview_url: Optional[str] = None
        self.notifications: List[Dict[str, str]] = []

    # ================== LIFECYCLE ==================
    def mount(self) -> None:
        """Fetch the article list the first time the page is shown."""
        if self.mounted:
            return
        self.mounted = True
        self.store.fetch_all()

    def refresh(self) -> None:
        """Re-fetch the article list."""
        self.store.fetch_all()

    # ================== NOTIFICATIONS ==================
    def _notify_success(self, message: str) -> None:
        if self.features.notifications:
            self.notifications.append({"level": "success", "message": message})

    def _notify_error(self, message: str) -> None:
        self.notifications.append({"level": "error", "message": message})

    def pop_notifications(self) -> List[Dict[str, str]]:
        """Return pending notifications and forget them."""
        pending, self.notifications = self.notifications, []
        return pending

    # ================== CREATE / EDIT MODAL ==================
    def open_create(self) -> None:
        """Open the modal with an empty draft."""
        self.draft = FormDraft()
        self.editing_id = None
        self.modal_open = True

    def cancel_modal(self) -> None:
        """Close the modal and discard the draft."""
        self._close_modal()

    def _close_modal(self) -> None:
        self.draft = None
        self.editing_id = None
        self.modal_open = False

    def update_draft(
        self,
        title: Optional[str] = None,
        summary: Optional[str] = None,
        content: Optional[str] = None
    ) -> None:
        """Set draft text fields; None leaves a field unchanged. Ignored while the modal is closed."""
        if not self.modal_open or self.draft is None:
            return
        if title is not None:
            self.draft.title = title
        if summary is not None:
            self.draft.summary = summary
        if content is not None:
            self.draft.content = content

    def select_files(self, files: List[PhotoFile]) -> None:
        """Replace the draft's selected files, keeping selection order. Ignored while the modal is closed."""
        if not self.modal_open or self.draft is None:
            return
        self.draft.photos = list(files)

    def request_edit(self, article_id: int) -> None:
        """
        Start editing an article.

        Shows the edit confirmation dialog when enabled, otherwise opens
        the pre-populated modal straight away.

        Raises:
            KeyError: If the article is not in the store
        """
        if self.store.find(article_id) is None:
            raise KeyError(article_id)
        if self.features.confirm_edits:
            self.edit_target_id = article_id
        else:
            self._begin_edit(article_id)

    def confirm_edit(self) -> None:
        """Open the modal for the article awaiting edit confirmation."""
        if self.edit_target_id is None:
            return
        article_id, self.edit_target_id = self.edit_target_id, None
        self._begin_edit(article_id)

    def cancel_edit(self) -> None:
        """Hide the edit confirmation dialog."""
        self.edit_target_id = None

    def _begin_edit(self, article_id: int) -> None:
        article = self.store.find(article_id)
        if article is None:
            # Gone since the last refresh
            self._notify_error(f"Article {article_id} no longer exists")
            return
        self.draft = FormDraft(
            title=article.get("title") or "",
            summary=article.get("summary") or "",
            content=article.get("content") or "",
        )
        self.editing_id = article_id
        self.modal_open = True

    def submit(self) -> bool:
        """
        Send the draft to the service.

        PUTs when an article is being edited, POSTs otherwise. On success
        the list is refreshed and the modal closed; on failure the modal
        and draft are kept for a retry.

        Returns:
            True if the service accepted the draft
        """
        if not self.modal_open or self.draft is None:
            # A repeated or stale form post after the modal already closed
            logger.warning("Submit ignored, no create/edit form is open")
            self._notify_error("Nothing to save, the form is no longer open")
            return False
        draft = self.draft
        try:
            if self.editing_id is not None:
                self.articles_api.update_article(
                    self.editing_id, draft.title, draft.summary, draft.content, draft.photos
                )
                message = "Article updated"
            else:
                self.articles_api.create_article(
                    draft.title, draft.summary, draft.content, draft.photos
                )
                message = "Article created"
        except REQUEST_ERRORS as e:
            logger.error("Saving article failed: %s", e)
            self._notify_error(f"Failed to save article: {e}")
            self.draft = draft
            self.modal_open = True
            return False

        self.refresh()
        self._close_modal()
        self._notify_success(message)
        return True

    # ================== DELETE DIALOG ==================
    def request_delete(self, article_id: int) -> None:
        """Ask for confirmation before deleting an article."""
        self.delete_target_id = article_id

    def cancel_delete(self) -> None:
        """Hide the delete confirmation dialog."""
        self.delete_target_id = None

    def confirm_delete(self) -> bool:
        """
        Delete the article awaiting confirmation and refresh the list.

        Returns:
            True if the service deleted the article
        """
        if self.delete_target_id is None:
            return False
        article_id, self.delete_target_id = self.delete_target_id, None
        try:
            self.articles_api.delete_article(article_id)
        except REQUEST_ERRORS as e:
            logger.error("Deleting article %s failed: %s", article_id, e)
            self._notify_error(f"Failed to delete article: {e}")
            return False
        else:
            self._notify_success("Article deleted")
            return True
        finally:
            self.refresh()

    # ================== PHOTOS ==================
    def photo_src(self, photo: Dict[str, Any]) -> str:
        """Resolve a photo's relative url against the media host."""
        return f"{self.media_base_url}{photo.get('url', '')}"

    def visible_photos(self, article: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], int]:
        """
        Split an article's photos for the listing.

        Returns:
            (photos to show, number of hidden photos for the '+N' suffix)
        """
        photos = article.get("photos") or []
        limit = self.features.photo_limit
        if limit == 0 or len(photos) <= limit:
            return list(photos), 0
        return list(photos[:limit]), len(photos) - limit

    def preview_photo(self, url: str) -> None:
        """Show a photo in the lightbox. Only media host URLs are accepted."""
        if not self.features.lightbox:
            return
        if not url.startswith(self.media_base_url + "/"):
            logger.warning("Preview ignored for URL outside the media host")
            return
        self.preview_url = url

    def close_preview(self) -> None:
        """Hide the lightbox."""
        self.preview_url = None
