"""
AnkiConnect client for adding dictionary cards to Anki.
Talks to the AnkiConnect add-on over its local HTTP API.
"""

import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

import requests

from config_loader import Config
from dictionary_lookup import Card

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8765"
DEFAULT_VERSION = 6

_WORD_RE = re.compile(r"[^\W_]+(?:['’][^\W_]+)*")
_SEARCH_SPECIAL_RE = re.compile(r'([\\"*_])')


class ErrorKind(Enum):
    NETWORK = "network"
    PROTOCOL = "protocol"
    DECODE = "decode"


class AnkiConnectError(Exception):
    """Exception raised when AnkiConnect cannot be reached or returns an error."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind


def title_case(text: str) -> str:
    """Capitalize each word, lower-casing the rest ("don't-STOP" -> "Don't-Stop")."""
    return _WORD_RE.sub(lambda m: m.group(0).capitalize(), text)


def format_back(card: Card) -> str:
    """Part of speech, a blank line, then one definition per line."""
    return card.part_of_speech + "<br><br>" + "<br>".join(card.definitions)


def escape_search(text: str) -> str:
    """Escape characters that Anki treats specially inside a quoted search term."""
    return _SEARCH_SPECIAL_RE.sub(r'\\\1', text)


def duplicate_query(word: str, deck: str, front_field: str = "Front") -> str:
    return f'"deck:{escape_search(deck)}" "{front_field.lower()}:{escape_search(word)}"'


class AnkiImporter:
    def __init__(
        self,
        url: str = DEFAULT_URL,
        version: int = DEFAULT_VERSION,
        timeout: Optional[float] = 10,
        model_name: str = "Basic",
        front_field: str = "Front",
        back_field: str = "Back",
    ):
        self.url = url
        self.version = version
        self.timeout = timeout
        self.model_name = model_name
        self.front_field = front_field
        self.back_field = back_field

    @classmethod
    def from_config(cls, config: Config) -> "AnkiImporter":
        return cls(
            url=config.anki_connect_url,
            version=config.anki_connect_version,
            timeout=config.timeout,
            model_name=config.model_name,
            front_field=config.front_field,
            back_field=config.back_field,
        )

    def invoke(self, action: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send a request to the AnkiConnect API and return its result.

        Raises:
            AnkiConnectError: NETWORK if the request never completes,
                PROTOCOL if AnkiConnect rejects it, DECODE if the reply
                is not a valid AnkiConnect response
        """
        payload = {
            "action": action,
            "version": self.version,
            "params": params or {}
        }
        logger.debug("AnkiConnect %s %s", action, payload["params"])

        try:
            response = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            raise AnkiConnectError(
                ErrorKind.NETWORK,
                "Could not connect to AnkiConnect. "
                "Make sure Anki is running with AnkiConnect installed."
            ) from e
        except requests.exceptions.RequestException as e:
            raise AnkiConnectError(ErrorKind.NETWORK, f"Request failed: {e}") from e

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise AnkiConnectError(ErrorKind.PROTOCOL, f"HTTP error: {e}") from e

        try:
            result = response.json()
        except ValueError as e:
            raise AnkiConnectError(ErrorKind.DECODE, f"Invalid JSON response: {e}") from e

        if not isinstance(result, dict) or "result" not in result or "error" not in result:
            raise AnkiConnectError(ErrorKind.DECODE, f"Unexpected response: {result!r}")

        if result["error"] is not None:
            raise AnkiConnectError(ErrorKind.PROTOCOL, f"AnkiConnect error: {result['error']}")

        return result["result"]

    def ping(self) -> int:
        """Check that AnkiConnect is reachable and return its API version."""
        version = self.invoke("version")
        logger.debug("Connected to AnkiConnect (version %s)", version)
        return version

    def find_cards(self, query: str) -> List[int]:
        cards = self.invoke("findCards", {"query": query})
        if not isinstance(cards, list):
            raise AnkiConnectError(ErrorKind.DECODE, f"Expected a list of card ids, got {cards!r}")
        return cards

    def is_duplicate(self, word: str, deck: str) -> bool:
        """True if the deck already holds a card whose front is exactly the word."""
        return len(self.find_cards(duplicate_query(word, deck, self.front_field))) > 0

    def build_note(self, card: Card, deck: str) -> Dict[str, Any]:
        return {
            "deckName": deck,
            "modelName": self.model_name,
            "fields": {
                self.front_field: title_case(card.word),
                self.back_field: format_back(card),
            },
        }

    def add_note(self, card: Card, deck: str) -> int:
        """Add the card as a note to the deck and return the new note id."""
        note_id = self.invoke("addNote", {"note": self.build_note(card, deck)})
        if note_id is None:
            raise AnkiConnectError(ErrorKind.PROTOCOL, "AnkiConnect did not return a note id")
        return note_id
