"""
Merriam-Webster Collegiate Dictionary lookup.
Fetches the entries for a word and turns the first one into a Card.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Union
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

API_URL = "https://www.dictionaryapi.com/api/v3/references/collegiate/json/"

# Failure stages
STAGE_NETWORK = "network"
STAGE_READ = "read"
STAGE_DECODE = "decode"
STAGE_NOT_FOUND = "not_found"


@dataclass
class Card:
    word: str
    part_of_speech: str = ""
    definitions: List[str] = field(default_factory=list)


class DictionaryError(Exception):
    """Exception raised when a definition cannot be fetched or parsed."""

    def __init__(self, stage: str, message: str):
        super().__init__(message)
        self.stage = stage


class DefinitionNotFound(DictionaryError):
    """The dictionary has no entry for the word."""

    def __init__(self, word: str, suggestions: Optional[List[str]] = None):
        super().__init__(STAGE_NOT_FOUND, f"No definition found for '{word}'")
        self.word = word
        self.suggestions = suggestions or []


def build_url(word: str) -> str:
    """Return the lookup URL for a word, encoded as a single path segment."""
    return API_URL + quote(word, safe='')


def parse_response(body: Union[str, bytes], word: str = "") -> Card:
    """
    Parse a Collegiate API response body into a Card.

    The API answers with a JSON array of entry objects. For unknown words
    it returns an array of suggested spellings instead, which is reported
    as DefinitionNotFound together with the suggestions.
    """
    try:
        entries = json.loads(body)
    except ValueError as e:
        print("Error: Failed to parse response body JSON.")
        raise DictionaryError(STAGE_DECODE, f"Invalid JSON: {e}") from e

    if not isinstance(entries, list):
        print("Error: Failed to parse response body JSON.")
        raise DictionaryError(STAGE_DECODE, f"Expected a JSON array, got {type(entries).__name__}")

    if not entries:
        raise DefinitionNotFound(word)

    first = entries[0]
    if isinstance(first, str):
        raise DefinitionNotFound(word, [s for s in entries if isinstance(s, str)])
    if not isinstance(first, dict):
        print("Error: Failed to parse response body JSON.")
        raise DictionaryError(STAGE_DECODE, f"Unexpected entry: {first!r}")

    part_of_speech = first.get("fl") or ""
    definitions = first.get("shortdef") or []
    if (not isinstance(part_of_speech, str)
            or not isinstance(definitions, list)
            or not all(isinstance(d, str) for d in definitions)):
        print("Error: Failed to parse response body JSON.")
        raise DictionaryError(STAGE_DECODE, "Malformed entry fields")

    return Card(
        word=word,
        part_of_speech=part_of_speech,
        definitions=list(definitions),
    )


def request_definition(word: str, api_key: str, timeout: Optional[float] = 10) -> Card:
    """
    Look up a word and return its first entry as a Card.

    Args:
        word: Word to look up, as typed by the user
        api_key: Merriam-Webster API key
        timeout: Request timeout in seconds

    Returns:
        Card whose word is the input word

    Raises:
        DictionaryError: on network, read or decode failure
        DefinitionNotFound: when the dictionary has no entry
    """
    url = build_url(word)
    logger.debug("GET %s", url)

    try:
        response = requests.get(url, params={"key": api_key}, timeout=timeout)
    except requests.exceptions.RequestException as e:
        print("Error: Failed to contact Merriam-Webster.")
        raise DictionaryError(STAGE_NETWORK, f"Request failed: {e}") from e

    try:
        response.raise_for_status()
        body = response.content
    except requests.exceptions.RequestException as e:
        print("Error: Failed to read response body.")
        raise DictionaryError(STAGE_READ, f"Bad response: {e}") from e

    logger.debug("Response (%d bytes): %s", len(body), body[:200])
    return parse_response(body, word)
