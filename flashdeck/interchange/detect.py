"""
Picks the right importer for a file handed to ``import-anki``.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..exceptions import RecordIOError, UnknownFormatError
from ..models import Deck
from .apkg import import_apkg
from .text_import import (
    DEFAULT_IMPORT_NAME,
    filename_to_title_case,
    import_anki_text,
    import_csv,
)

logger = logging.getLogger(__name__)

# Bytes read from an unrecognised file when sniffing for a delimiter.
SNIFF_BYTES = 4096


class ImportFormat(str, Enum):
    APKG = "apkg"
    ANKI_TEXT = "anki-text"
    CSV = "csv"


_SUFFIX_FORMATS = {
    ".apkg": ImportFormat.APKG,
    ".txt": ImportFormat.ANKI_TEXT,
    ".tsv": ImportFormat.ANKI_TEXT,
    ".csv": ImportFormat.CSV,
}


def detect_format(path: Path) -> ImportFormat:
    """
    Decide how to read ``path``: by suffix first, then by looking for a tab or
    semicolon in the first few kilobytes.

    Raises:
        RecordIOError: If the file has to be sniffed and cannot be read.
        UnknownFormatError: If neither the suffix nor the content identifies
            a supported format.
    """
    path = Path(path)
    fmt = _SUFFIX_FORMATS.get(path.suffix.lower())
    if fmt is not None:
        return fmt

    try:
        with path.open("rb") as fh:
            head = fh.read(SNIFF_BYTES)
    except OSError as e:
        raise RecordIOError(
            f"Failed to read {path}: {e}", original_exception=e
        ) from e

    sample = head.decode("utf-8", errors="ignore")
    if "\t" in sample or ";" in sample:
        logger.debug(f"Sniffed delimited text in {path.name}")
        return ImportFormat.ANKI_TEXT

    raise UnknownFormatError(
        f"Unrecognised file format: {path.name}. "
        "Expected an .apkg package, a .txt/.tsv Anki text export or a .csv file."
    )


def import_anki(path: Path, deck_name: Optional[str] = None) -> List[Deck]:
    """
    Read any supported Anki export into unsaved decks.

    A package may yield several decks named after the packaged decks; a text
    file yields one deck named ``deck_name``, or after the file when omitted.
    """
    path = Path(path)
    fmt = detect_format(path)
    logger.info(f"Importing {path.name} as {fmt.value}")

    if fmt is ImportFormat.APKG:
        return import_apkg(path)

    name = deck_name or filename_to_title_case(path.stem) or DEFAULT_IMPORT_NAME
    if fmt is ImportFormat.CSV:
        return [import_csv(path, name)]
    return [import_anki_text(path, name)]
