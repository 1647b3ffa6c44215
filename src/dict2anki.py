#!/usr/bin/env python3
"""
dict2anki: create an Anki card from a Merriam-Webster definition.
Usage: dict2anki <word>
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from anki_importer import AnkiConnectError, AnkiImporter
from config_loader import Config, ConfigError, load_config
from dictionary_lookup import DefinitionNotFound, DictionaryError, request_definition

logger = logging.getLogger(__name__)

DESCRIPTION = "dict2anki is a tool for quickly creating Anki cards from words."

EPILOG = """
Note:
  This tool requires a valid Merriam-Webster API key and a deck name
  specified in the config file located at "~/.config/dict2anki/config.json":

    {"apiKey": "<your key>", "deckName": "English"}

  Also required is a running instance of Anki with AnkiConnect.
"""


def print_card(card) -> None:
    print(card.word)
    print(card.part_of_speech)
    print("\n".join(card.definitions))


def run(word: str, config: Config, importer: Optional[AnkiImporter] = None) -> int:
    """
    Look up a word and add it to the configured deck unless it is already there.

    Returns:
        Process exit status: 0 on success or duplicate, 1 on failure
    """
    if importer is None:
        importer = AnkiImporter.from_config(config)

    try:
        importer.ping()
    except AnkiConnectError as e:
        logger.debug("Ping failed (%s): %s", e.kind.value, e)
        print("Fatal: Failed to connect to Anki. Is it running? Does it have AnkiConnect?")
        return 1

    try:
        card = request_definition(word, config.api_key, timeout=config.timeout)
    except DefinitionNotFound as e:
        print(f"Fatal: No definition found for '{word}'.")
        if e.suggestions:
            print(f"Did you mean: {', '.join(e.suggestions)}?")
        return 1
    except DictionaryError as e:
        logger.debug("Lookup failed at %s stage: %s", e.stage, e)
        print("Fatal: Failed to connect to Merriam-Webster, or failed to parse response.")
        return 1

    print_card(card)

    try:
        duplicate = importer.is_duplicate(card.word, config.deck_name)
    except AnkiConnectError as e:
        print("Fatal: Failed to query deck for duplicates.")
        print(f"Error: {e}")
        return 1

    if duplicate:
        print("Duplicate detected, omitting.")
        return 0

    try:
        note_id = importer.add_note(card, config.deck_name)
    except AnkiConnectError as e:
        print("Fatal: Failed to add card to deck.")
        print(f"Error: {e}")
        return 1

    logger.debug("Added note %s to %s", note_id, config.deck_name)
    print("Done.")
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="dict2anki",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument('word', help='Word to look up and add to Anki')
    args = parser.parse_args(argv)
    if not args.word.strip():
        parser.error("word must not be empty")

    level = logging.DEBUG if os.getenv('DICT2ANKI_DEBUG') else logging.WARNING
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')

    try:
        config = load_config()
    except ConfigError as e:
        print("Fatal: Failed to open config file.")
        print(f"Error: {e}")
        sys.exit(1)

    sys.exit(run(args.word, config))


if __name__ == "__main__":
    main()
