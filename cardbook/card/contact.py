"""
Contact data model for vCard address books.

Provides immutable representations of a parsed vCard:
- Contact with name, birthday, phone numbers, emails, categories and photo
- Fingerprint derived from the raw card text for identification
- Predicates used by the qualification filter
"""

import hashlib
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

# Media type attached to every embedded photo
DEFAULT_PHOTO_MEDIA_TYPE = "application/octet-stream"


def fingerprint(raw: str) -> str:
    """
    Compute a stable identifier for a raw card record.

    The identifier depends only on the raw text, never on parsed fields,
    so identical input always yields the same value.

    Args:
        raw: Raw vCard text

    Returns:
        SHA-256 hex digest of the UTF-8 encoded text
    """
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class PhoneNumber:
    """A telephone entry with its comma-joined type label."""

    type: str
    number: str


@dataclass(frozen=True)
class Email:
    """An email entry with its comma-joined type label."""

    type: str
    email: str


@dataclass(frozen=True)
class Photo:
    """Opaque photo payload taken from the first PHOTO property."""

    data: bytes
    media_type: str = DEFAULT_PHOTO_MEDIA_TYPE

    def __repr__(self) -> str:
        return f"Photo(media_type={self.media_type!r}, size={len(self.data)})"


@dataclass(frozen=True)
class Contact:
    """
    Parsed, immutable contact.

    Attributes:
        uid: Fingerprint of the raw record this contact was parsed from
        given_name: First name from the N property
        family_name: Last name from the N property
        birthday: Birthday, if the card declares one
        phone_numbers: Telephone entries in card order
        emails: Email entries in card order
        categories: Category labels declared by the card
        photo: First embedded photo, if any

    Usage:
        contact = parser.parse(raw_text)

        if contact.has_full_name() and contact.of_category("Family"):
            print(contact.full_name)
    """

    uid: str
    given_name: str = ""
    family_name: str = ""
    birthday: Optional[date] = None
    phone_numbers: tuple[PhoneNumber, ...] = ()
    emails: tuple[Email, ...] = ()
    categories: frozenset[str] = field(default_factory=frozenset)
    photo: Optional[Photo] = None

    @property
    def full_name(self) -> str:
        """Given and family name joined by a space."""
        return f"{self.given_name} {self.family_name}".strip()

    def has_full_name(self) -> bool:
        return bool(self.full_name)

    def has_birthday(self) -> bool:
        return self.birthday is not None

    def has_emails(self) -> bool:
        return len(self.emails) > 0

    def has_phone_numbers(self) -> bool:
        return len(self.phone_numbers) > 0

    def of_category(self, category: str) -> bool:
        """Check whether the contact carries the given category label."""
        return category in self.categories

    def __str__(self) -> str:
        return f"Contact({self.full_name or '<unnamed>'})"
