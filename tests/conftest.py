import logging

import pytest

from oak import config
from oak.schema_loader import get_registry
from tests.utils import example_document, write_json

logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def reset_oak_config():
    """Reset module-level configuration and the schema cache around each test."""
    config.reset_config()
    get_registry().clear()
    yield
    config.reset_config()
    get_registry().clear()


@pytest.fixture
def card_doc():
    return example_document("card")


@pytest.fixture
def artifact_doc():
    return example_document("knowledge")


@pytest.fixture
def trust_doc():
    return example_document("trust")


@pytest.fixture
def oak_workspace(tmp_path):
    """
    A small OAK workspace with a card, two artifacts and one trust assertion.

    The older artifact is written first so that listing order has to come from
    the ``created`` timestamps rather than the directory walk.
    """
    root = tmp_path / "oak-src"
    write_json(
        root / "card.json",
        {
            "name": "test-agent",
            "description": "Test agent for build",
            "url": "https://test.example.com",
            "oak": {
                "version": "0.1",
                "endpoints": {
                    "knowledge": "https://test.example.com/oak/knowledge/_index",
                    "trust": "https://test.example.com/oak/trust/_index",
                },
                "topics": ["testing"],
                "stats": {"artifactCount": 0, "citedByCount": 0, "trustedByCount": 0},
                "createdAt": "2026-02-01T00:00:00Z",
                "updatedAt": "2026-02-01T00:00:00Z",
            },
        },
    )
    write_json(
        root / "knowledge" / "2026-02-01" / "first-artifact.json",
        {
            "id": "test-agent/2026-02-01/first-artifact",
            "version": 1,
            "author": {"name": "test-agent", "cardUrl": "https://test.example.com/oak/card"},
            "type": "finding",
            "created": "2026-02-01T10:00:00Z",
            "topics": ["testing"],
            "title": "First Test Artifact",
            "content": {"summary": "This is the first test artifact.", "detail": "Full detail here."},
            "citations": [],
            "signature": None,
        },
    )
    write_json(
        root / "knowledge" / "2026-02-02" / "second-artifact.json",
        {
            "id": "test-agent/2026-02-02/second-artifact",
            "version": 1,
            "author": {"name": "test-agent", "cardUrl": "https://test.example.com/oak/card"},
            "type": "synthesis",
            "created": "2026-02-02T10:00:00Z",
            "topics": ["testing", "meta"],
            "title": "Second Test Artifact",
            "content": {"summary": "This builds on the first.", "detail": "Full synthesis here."},
            "citations": [
                {
                    "artifactId": "test-agent/2026-02-01/first-artifact",
                    "artifactUrl": "https://test.example.com/oak/knowledge/artifacts/test-agent/2026-02-01/first-artifact",
                    "context": "Building on first finding",
                }
            ],
            "services": [
                {"name": "summarize", "endpoint": "https://test.example.com/services/summarize"},
                {"name": "compare", "endpoint": "https://test.example.com/services/compare"},
            ],
            "signature": None,
        },
    )
    write_json(
        root / "trust" / "other-agent" / "testing.json",
        {
            "id": "test-agent/trust/other-agent/testing",
            "from": {"name": "test-agent", "cardUrl": "https://test.example.com/oak/card"},
            "to": {"name": "other-agent", "cardUrl": "https://other.example.com/oak/card"},
            "topic": "testing",
            "level": 0.7,
            "reason": "Reliable test data",
            "supportingCitations": [],
            "created": "2026-02-01T00:00:00Z",
            "updated": "2026-02-01T00:00:00Z",
        },
    )
    return root
