"""
Directory based source collector.

Reads every vCard file matching a glob pattern inside one directory. Each
file may hold any number of cards.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cardbook.config.settings import DEFAULT_CARD_PATTERN
from cardbook.sources.base import SourceError, split_cards

logger = logging.getLogger(__name__)


class DirectorySource:
    """
    Collects raw cards from the files of a directory.

    Files are read in name order so repeated cycles over unchanged files
    return the same records in the same order. Subdirectories are not
    scanned.

    Usage:
        source = DirectorySource(Path("~/contacts").expanduser())
        records = source.fetch_raw_records()
    """

    def __init__(self, path: Path | str, pattern: str = DEFAULT_CARD_PATTERN):
        self.path = Path(path)
        self.pattern = pattern

    def __repr__(self) -> str:
        return f"DirectorySource({str(self.path)!r}, pattern={self.pattern!r})"

    def _card_files(self) -> list[Path]:
        if not self.path.is_dir():
            raise SourceError(f"Card directory not found: {self.path}")

        # Match the pattern regardless of extension case (.vcf / .VCF)
        pattern = self.pattern.lower()
        return sorted(
            p
            for p in self.path.iterdir()
            if p.is_file() and Path(p.name.lower()).match(pattern)
        )

    def fetch_raw_records(self) -> list[str]:
        """
        Read and split every matching file.

        Raises:
            SourceError: If the directory is missing or a file can't be read
        """
        records: list[str] = []
        try:
            files = self._card_files()
            for card_file in files:
                text = card_file.read_text(encoding="utf-8", errors="replace")
                cards = split_cards(text)
                logger.debug(f"{len(cards)} card(s) read from {card_file.name}")
                records.extend(cards)
        except OSError as e:
            raise SourceError(f"Failed to read cards from {self.path}: {e}") from e

        logger.debug(f"{len(records)} raw card(s) collected from {len(files)} file(s)")
        return records
