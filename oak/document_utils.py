"""
Document loading utilities for the OAK toolkit.

Candidate documents are read from a local file or fetched from a published
OAK endpoint over HTTP(S), for example an agent's ``oak/card`` resource.
"""

import json
import logging
import urllib.parse
from pathlib import Path
from typing import Any, Optional, Union

import requests

from oak import config
from oak.errors import DocumentNotFoundError, DocumentParseError

logger = logging.getLogger(__name__)


def is_url(source: Union[str, Path]) -> bool:
    if isinstance(source, Path):
        return False
    return urllib.parse.urlparse(source).scheme in ("http", "https")


def fetch_document(url: str, session: requests.Session) -> Any:
    """
    Retrieve a JSON document from a URL.

    Args:
        url: The document URL
        session: A requests.Session object to use for making the request

    Returns:
        The parsed JSON document

    Raises:
        DocumentNotFoundError: If the request fails or returns an error status
        DocumentParseError: If the response body is not valid JSON
    """
    logger.info(f"Fetching document from {url}")
    try:
        response = session.get(url, timeout=config.get_fetch_timeout())
        response.raise_for_status()
    except requests.RequestException as e:
        raise DocumentNotFoundError(f"Failed to fetch {url}: {e}") from e

    try:
        document = response.json()
    except ValueError as e:
        raise DocumentParseError(f"JSON parse error in {url}: {e}") from e

    logger.debug(f"Fetched {url}: {json.dumps(document)[:200]}...")
    return document


def read_document(path: Union[str, Path]) -> Any:
    """
    Read a JSON document from disk.

    Raises:
        DocumentNotFoundError: If the file does not exist
        DocumentParseError: If the file is not valid JSON
    """
    path = Path(path)
    if not path.is_file():
        raise DocumentNotFoundError(f"File not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DocumentParseError(f"JSON parse error in {path}: {e}") from e


def load_document(source: Union[str, Path], session: Optional[requests.Session] = None) -> Any:
    """
    Load a candidate document from a file path or an http(s) URL.

    Args:
        source: Local path or URL
        session: Session used for URLs; a new one is created when omitted

    Returns:
        The parsed JSON document
    """
    if not is_url(source):
        return read_document(source)

    if session is not None:
        return fetch_document(str(source), session)
    with requests.Session() as own_session:
        return fetch_document(str(source), own_session)
