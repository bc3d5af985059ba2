"""
Source collector contract and shared helpers.

A source collector supplies the ordered list of raw vCard records for one
refresh cycle. Concrete collectors live next to this module.
"""

from __future__ import annotations

from typing import Protocol

# Card delimiters, compared case-insensitively
_BEGIN = "BEGIN:VCARD"
_END = "END:VCARD"


class SourceError(Exception):
    """Raised when a source cannot supply records for a cycle."""

    pass


class SourceCollector(Protocol):
    """Supplies raw vCard records on demand."""

    def fetch_raw_records(self) -> list[str]:
        """
        Return the current raw records, in a stable order.

        Raises:
            SourceError: If the records cannot be retrieved
        """
        ...


def split_cards(text: str) -> list[str]:
    """
    Split a vCard stream into individual card records.

    A card runs from a BEGIN:VCARD line to the next END:VCARD line. A card
    left open when the next BEGIN:VCARD or the end of the text arrives is
    still returned, so the parser reports it. Text that holds no
    BEGIN:VCARD line at all is returned whole as a single record.

    Args:
        text: Content of a .vcf file or a downloaded collection

    Returns:
        List of raw card records in stream order
    """
    cards: list[str] = []
    current: list[str] | None = None

    for line in text.splitlines(keepends=True):
        marker = line.strip().upper()
        if marker == _BEGIN:
            if current is not None:
                cards.append("".join(current).strip())
            current = [line]
        elif current is not None:
            current.append(line)
            if marker == _END:
                cards.append("".join(current).strip())
                current = None

    if current is not None:
        cards.append("".join(current).strip())

    if not cards and text.strip():
        return [text]
    return cards
