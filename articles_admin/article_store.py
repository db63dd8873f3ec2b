"""
In-memory article list kept in sync with the articles service.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from articles_admin.articles_api import ArticlesAPI

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch articles"


class FetchStatus(str, Enum):
    """Lifecycle of the article list fetch."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ArticleStore:
    """
    Holds the article list, the fetch status and the last fetch error.

    The list is only ever replaced wholesale by fetch_all(); mutations go
    through ArticlesAPI and are followed by another fetch_all().
    """

    def __init__(self, articles_api: ArticlesAPI):
        """
        Initialize an empty store.

        Args:
            articles_api: Client used to fetch the article list
        """
        self.articles_api = articles_api
        self.articles: List[Dict[str, Any]] = []
        self.status = FetchStatus.IDLE
        self.error: Optional[str] = None

    def fetch_all(self) -> None:
        """
        Fetch every article and replace the stored list.

        Failures never raise; they set status to FAILED and record the
        error message (or a fixed fallback when the error has none).
        """
        self.status = FetchStatus.LOADING
        try:
            body = self.articles_api.list_articles()
            articles = body["data"]["data"]
            if not isinstance(articles, list):
                raise TypeError("Expected data.data to be a list of articles")
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            self.status = FetchStatus.FAILED
            self.error = str(e) or FETCH_FAILED_MESSAGE
            logger.error("Fetching articles failed: %s", self.error)
            return

        self.articles = articles
        self.status = FetchStatus.SUCCEEDED
        self.error = None
        logger.info("Fetched %d article(s)", len(articles))

    def find(self, article_id: int) -> Optional[Dict[str, Any]]:
        """Return the stored article with the given id, or None."""
        for article in self.articles:
            if article.get("id") == article_id:
                return article
        return None

    def snapshot(self) -> Dict[str, Any]:
        """Return the store state as plain JSON-serializable data."""
        return {
            "articles": list(self.articles),
            "status": self.status.value,
            "error": self.error,
        }
