"""
Unit tests for the article store.
"""
from unittest.mock import MagicMock

import pytest
import requests
import requests_mock

from articles_admin.article_store import ArticleStore, FetchStatus, FETCH_FAILED_MESSAGE
from articles_admin.articles_api import ArticlesAPI

BASE_URL = "http://localhost:8081/api"

ARTICLES = [
    {"id": 3, "title": "Third", "summary": "s3", "content": "c3", "slug": "third",
     "published_at": "2024-01-03T00:00:00Z", "photos": [{"url": "/uploads/c.jpg"}]},
    {"id": 1, "title": "First", "summary": "s1", "content": "c1", "slug": "first",
     "published_at": "2024-01-01T00:00:00Z", "photos": []},
]


class TestArticleStore:
    """Test suite for ArticleStore."""

    @pytest.fixture
    def store(self):
        """Create a store backed by a real client."""
        return ArticleStore(ArticlesAPI(base_url=BASE_URL))

    def test_initial_state(self, store):
        """Test that a new store is idle and empty."""
        assert store.articles == []
        assert store.status == FetchStatus.IDLE
        assert store.error is None

    def test_fetch_all_success_replaces_articles_in_server_order(self, store):
        """Test that a successful fetch stores exactly the server array."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", json={"data": {"data": ARTICLES}})
            store.fetch_all()

        assert store.articles == ARTICLES
        assert [a["id"] for a in store.articles] == [3, 1]
        assert store.status == FetchStatus.SUCCEEDED
        assert store.error is None

    def test_fetch_all_replaces_rather_than_merges(self, store):
        """Test that each fetch replaces the whole list."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", [
                {"json": {"data": {"data": ARTICLES}}},
                {"json": {"data": {"data": [ARTICLES[1]]}}},
            ])
            store.fetch_all()
            store.fetch_all()

        assert store.articles == [ARTICLES[1]]

    def test_fetch_all_http_error_sets_failed(self, store):
        """Test that a server error marks the store failed with a message."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", status_code=500)
            store.fetch_all()

        assert store.status == FetchStatus.FAILED
        assert store.error
        assert "500" in store.error

    def test_fetch_all_keeps_previous_articles_on_failure(self, store):
        """Test that a failed fetch leaves the last good list in place."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", [
                {"json": {"data": {"data": ARTICLES}}},
                {"exc": requests.exceptions.ConnectionError("refused")},
            ])
            store.fetch_all()
            store.fetch_all()

        assert store.articles == ARTICLES
        assert store.status == FetchStatus.FAILED
        assert store.error == "refused"

    def test_fetch_all_uses_fallback_for_empty_message(self):
        """Test the fixed fallback message for errors without text."""
        api = MagicMock()
        api.list_articles.side_effect = requests.exceptions.ConnectionError()
        store = ArticleStore(api)

        store.fetch_all()

        assert store.status == FetchStatus.FAILED
        assert store.error == FETCH_FAILED_MESSAGE

    @pytest.mark.parametrize("body", [
        {"data": []},
        {"articles": []},
        {"data": {"data": "nope"}},
    ])
    def test_fetch_all_malformed_body_sets_failed(self, store, body):
        """Test that an unexpected body shape counts as a failure."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", json=body)
            store.fetch_all()

        assert store.status == FetchStatus.FAILED
        assert store.error

    def test_status_is_loading_while_request_outstanding(self):
        """Test that status is loading during the request only."""
        store = None
        seen = []

        def list_articles():
            seen.append(store.status)
            return {"data": {"data": []}}

        api = MagicMock()
        api.list_articles.side_effect = list_articles
        store = ArticleStore(api)

        store.fetch_all()

        assert seen == [FetchStatus.LOADING]
        assert store.status == FetchStatus.SUCCEEDED

    def test_successful_fetch_clears_previous_error(self, store):
        """Test that a later success clears the recorded error."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", [
                {"status_code": 503},
                {"json": {"data": {"data": []}}},
            ])
            store.fetch_all()
            assert store.error
            store.fetch_all()

        assert store.status == FetchStatus.SUCCEEDED
        assert store.error is None

    def test_find(self, store):
        """Test looking up an article by id."""
        store.articles = list(ARTICLES)
        assert store.find(1)["title"] == "First"
        assert store.find(42) is None

    def test_snapshot(self, store):
        """Test the JSON-serializable snapshot."""
        store.articles = [ARTICLES[1]]
        store.status = FetchStatus.SUCCEEDED
        assert store.snapshot() == {
            "articles": [ARTICLES[1]],
            "status": "succeeded",
            "error": None,
        }
