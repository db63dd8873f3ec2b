"""
API tests for the articles REST service wrapper.
"""
import pytest
import requests
import requests_mock

from articles_admin.articles_api import ArticlesAPI

BASE_URL = "http://localhost:8081/api"


class TestArticlesAPI:
    """Test suite for ArticlesAPI class."""

    @pytest.fixture
    def articles_api(self):
        """Create ArticlesAPI instance for testing."""
        return ArticlesAPI(base_url=BASE_URL)

    def test_base_url_trailing_slash_is_dropped(self):
        """Test that a trailing slash does not produce double slashes."""
        api = ArticlesAPI(base_url=BASE_URL + "/")
        assert api.base_url == BASE_URL

    def test_list_articles_success(self, articles_api):
        """Test listing articles returns the parsed body."""
        with requests_mock.Mocker() as m:
            body = {"data": {"data": [{"id": 1, "title": "First", "photos": []}]}}
            m.get(f"{BASE_URL}/articles", json=body)

            result = articles_api.list_articles()
            assert result == body
            assert m.call_count == 1

    def test_list_articles_http_error_raises(self, articles_api):
        """Test that a non-2xx response raises HTTPError."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", status_code=500, json={"message": "Server Error"})

            with pytest.raises(requests.exceptions.HTTPError):
                articles_api.list_articles()

    def test_list_articles_connection_error_raises(self, articles_api):
        """Test that transport failures propagate to the caller."""
        with requests_mock.Mocker() as m:
            m.get(f"{BASE_URL}/articles", exc=requests.exceptions.ConnectionError("refused"))

            with pytest.raises(requests.exceptions.ConnectionError):
                articles_api.list_articles()

    def test_create_article_posts_multipart_without_photos(self, articles_api):
        """Test that create sends exactly the three text fields as multipart."""
        with requests_mock.Mocker() as m:
            m.post(f"{BASE_URL}/articles", json={"id": 1, "title": "T"}, status_code=201)

            result = articles_api.create_article("T", "S", "C")

            assert result["id"] == 1
            assert m.call_count == 1
            request = m.last_request
            assert request.method == "POST"
            assert request.headers["Content-Type"].startswith("multipart/form-data")
            assert b'name="title"\r\n\r\nT\r\n' in request.body
            assert b'name="summary"\r\n\r\nS\r\n' in request.body
            assert b'name="content"\r\n\r\nC\r\n' in request.body
            assert b'name="photos[]"' not in request.body

    def test_create_article_appends_photos_in_order(self, articles_api):
        """Test that each selected file becomes one photos[] part, in order."""
        with requests_mock.Mocker() as m:
            m.post(f"{BASE_URL}/articles", json={"id": 2})

            photos = [
                ("first.jpg", b"\xff\xd8first", "image/jpeg"),
                ("second.png", b"\x89PNGsecond", "image/png"),
            ]
            articles_api.create_article("T", "S", "C", photos)

            body = m.last_request.body
            assert body.count(b'name="photos[]"') == 2
            first = body.index(b'filename="first.jpg"')
            second = body.index(b'filename="second.png"')
            assert first < second
            # Bytes are passed through untouched
            assert b"\xff\xd8first" in body
            assert b"\x89PNGsecond" in body

    def test_update_article_puts_to_article_url(self, articles_api):
        """Test that update issues a PUT to /articles/{id}."""
        with requests_mock.Mocker() as m:
            m.put(f"{BASE_URL}/articles/7", json={"id": 7, "title": "New"})

            result = articles_api.update_article(7, "New", "S", "C")

            assert result["title"] == "New"
            assert m.last_request.method == "PUT"
            assert m.last_request.url == f"{BASE_URL}/articles/7"
            assert b'name="title"\r\n\r\nNew\r\n' in m.last_request.body

    def test_update_article_not_found_raises(self, articles_api):
        """Test that updating a missing article raises HTTPError."""
        with requests_mock.Mocker() as m:
            m.put(f"{BASE_URL}/articles/999", status_code=404, text="not json")

            with pytest.raises(requests.exceptions.HTTPError):
                articles_api.update_article(999, "T", "S", "C")

    def test_delete_article_with_empty_body(self, articles_api):
        """Test that delete tolerates a bodiless 204 response."""
        with requests_mock.Mocker() as m:
            m.delete(f"{BASE_URL}/articles/3", status_code=204)

            assert articles_api.delete_article(3) is None
            assert m.last_request.method == "DELETE"
            assert m.last_request.url == f"{BASE_URL}/articles/3"

    def test_delete_article_with_json_body(self, articles_api):
        """Test that delete returns a JSON body when the service sends one."""
        with requests_mock.Mocker() as m:
            m.delete(f"{BASE_URL}/articles/3", json={"message": "deleted"})

            assert articles_api.delete_article(3) == {"message": "deleted"}

    def test_delete_article_error_raises(self, articles_api):
        """Test that a failed delete raises HTTPError."""
        with requests_mock.Mocker() as m:
            m.delete(f"{BASE_URL}/articles/3", status_code=500, json={"message": "boom"})

            with pytest.raises(requests.exceptions.HTTPError):
                articles_api.delete_article(3)

    def test_build_multipart_defaults_to_no_photos(self):
        """Test the payload layout for text-only drafts."""
        parts = ArticlesAPI.build_multipart("T", "S", "C")
        assert parts == [
            ("title", (None, "T")),
            ("summary", (None, "S")),
            ("content", (None, "C")),
        ]
