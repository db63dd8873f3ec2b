"""
REST API wrapper for the remote articles service.
Handles listing, creating, updating and deleting articles.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

# Configure logging
logger = logging.getLogger(__name__)

# (filename, raw bytes, content type)
PhotoFile = Tuple[str, bytes, str]


class ArticlesAPI:
    """Wrapper for the articles REST service operations."""

    TIMEOUT = 30

    def __init__(self, base_url: str):
        """
        Initialize articles API client.

        Args:
            base_url: Service base URL, e.g. http://localhost:8081/api
        """
        self.base_url = base_url.rstrip("/")

    def _url(self, article_id: Optional[int] = None) -> str:
        if article_id is None:
            return f"{self.base_url}/articles"
        return f"{self.base_url}/articles/{article_id}"

    @staticmethod
    def build_multipart(
        title: str,
        summary: str,
        content: str,
        photos: Optional[List[PhotoFile]] = None
    ) -> List[Tuple[str, Tuple[Optional[str], Any]]]:
        """
        Build the multipart payload for create and update requests.

        Text fields are encoded as filename-less parts so the request is
        multipart even when no photos are attached. Photos are appended as
        repeated 'photos[]' parts in the given order, bytes untouched.

        Args:
            title: Article title
            summary: Article summary
            content: Article body
            photos: Selected files as (filename, data, content_type)

        Returns:
            List of (field name, part) tuples accepted by requests' files=
        """
        parts = [
            ("title", (None, title)),
            ("summary", (None, summary)),
            ("content", (None, content)),
        ]
        for filename, data, content_type in photos or []:
            parts.append(("photos[]", (filename, data, content_type)))
        return parts

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Issue a request and raise on non-2xx responses.

        Raises:
            requests.exceptions.HTTPError: If the service returns an error status
            requests.exceptions.RequestException: On transport failures
        """
        try:
            response = requests.request(method, url, timeout=self.TIMEOUT, **kwargs)
            response.raise_for_status()
            return response
        except requests.exceptions.HTTPError as e:
            try:
                error_data = e.response.json()
                error_msg = error_data.get("message", str(e)) if isinstance(error_data, dict) else str(e)
                logger.error(
                    "%s %s failed with HTTP %s: %s",
                    method, url, e.response.status_code, error_msg
                )
                logger.debug("Full error response: %s", json.dumps(error_data, indent=2))
            except ValueError:
                logger.error(
                    "%s %s failed with HTTP %s (could not parse error body)",
                    method, url, e.response.status_code
                )
            # Re-raise so caller can handle
            raise

    def list_articles(self) -> Dict[str, Any]:
        """
        Fetch every article.

        Returns:
            Parsed response body, shaped {"data": {"data": [...]}}
        """
        response = self._send("GET", self._url())
        return response.json()

    def create_article(
        self,
        title: str,
        summary: str,
        content: str,
        photos: Optional[List[PhotoFile]] = None
    ) -> Dict[str, Any]:
        """
        Create an article.

        Returns:
            The created article as returned by the service
        """
        files = self.build_multipart(title, summary, content, photos)
        logger.info("Creating article with %d photo(s)", len(photos or []))
        response = self._send("POST", self._url(), files=files)
        return response.json()

    def update_article(
        self,
        article_id: int,
        title: str,
        summary: str,
        content: str,
        photos: Optional[List[PhotoFile]] = None
    ) -> Dict[str, Any]:
        """
        Replace an article's fields and append any new photos.

        Returns:
            The updated article as returned by the service
        """
        files = self.build_multipart(title, summary, content, photos)
        logger.info("Updating article %s with %d photo(s)", article_id, len(photos or []))
        response = self._send("PUT", self._url(article_id), files=files)
        return response.json()

    def delete_article(self, article_id: int) -> Optional[Dict[str, Any]]:
        """
        Delete an article.

        Returns:
            Parsed response body, or None when the service sends no JSON
        """
        logger.info("Deleting article %s", article_id)
        response = self._send("DELETE", self._url(article_id))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return None
