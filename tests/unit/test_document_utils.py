"""
Unit tests for loading candidate documents from disk and over HTTP.
"""

from unittest.mock import Mock

import pytest
import requests
import responses

from oak import config, document_utils
from oak.errors import DocumentNotFoundError, DocumentParseError
from tests.utils import example_document, write_json

pytestmark = pytest.mark.core

CARD_URL = "https://lobster.example.com/oak/card"


class TestIsUrl:
    @pytest.mark.parametrize(
        "source,expected",
        [
            ("https://example.com/oak/card", True),
            ("http://localhost:8000/oak/card", True),
            ("oak/card.json", False),
            ("/abs/path/card.json", False),
            ("file:///tmp/card.json", False),
        ],
    )
    def test_is_url(self, source, expected):
        assert document_utils.is_url(source) is expected


class TestReadDocument:
    def test_reads_json(self, tmp_path):
        path = write_json(tmp_path / "card.json", {"name": "x"})

        assert document_utils.load_document(path) == {"name": "x"}
        assert document_utils.load_document(str(path)) == {"name": "x"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentNotFoundError, match="File not found"):
            document_utils.load_document(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text('{"name": ', encoding="utf-8")

        with pytest.raises(DocumentParseError, match="JSON parse error"):
            document_utils.load_document(path)


class TestFetchDocument:
    @responses.activate
    def test_fetch_success(self):
        card = example_document("card")
        responses.add(responses.GET, CARD_URL, json=card, status=200)

        assert document_utils.load_document(CARD_URL) == card
        assert responses.calls[0].request.url == CARD_URL

    @responses.activate
    def test_fetch_http_error(self):
        responses.add(responses.GET, CARD_URL, status=404)

        with pytest.raises(DocumentNotFoundError, match="Failed to fetch"):
            document_utils.load_document(CARD_URL)

    @responses.activate
    def test_fetch_invalid_json(self):
        responses.add(responses.GET, CARD_URL, body="<html>not json</html>", status=200)

        with pytest.raises(DocumentParseError, match="JSON parse error"):
            document_utils.load_document(CARD_URL)

    def test_fetch_uses_session_and_timeout(self):
        config.set_fetch_timeout(3)
        session = Mock()
        response_mock = Mock()
        response_mock.json.return_value = {"name": "x"}
        session.get.return_value = response_mock

        result = document_utils.load_document(CARD_URL, session=session)

        assert result == {"name": "x"}
        session.get.assert_called_once_with(CARD_URL, timeout=3)
        response_mock.raise_for_status.assert_called_once()

    def test_connection_error(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("connection refused")

        with pytest.raises(DocumentNotFoundError, match="connection refused"):
            document_utils.fetch_document(CARD_URL, session)
