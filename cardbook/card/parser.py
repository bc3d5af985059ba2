"""
vCard parsing for cardbook.

Converts one raw vCard record into an immutable Contact using vobject.
The parser holds no per-call state, so a single instance is shared by
every refresh cycle and may be used from any thread.
"""

import base64
import binascii
import logging
import re
from datetime import date, datetime
from typing import Any, Optional

import vobject
from vobject.base import VObjectError

from cardbook.card.contact import (
    DEFAULT_PHOTO_MEDIA_TYPE,
    Contact,
    Email,
    PhoneNumber,
    Photo,
    fingerprint,
)

logger = logging.getLogger(__name__)

# Separator used when joining property parameters into a type label
TYPE_LABEL_SEPARATOR = ", "

# Accepted birthday layouts: 1980-05-17, 19800517, 1980-05-17T00:00:00Z
_BDAY_EXTENDED = re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:T.*)?$")
_BDAY_BASIC = re.compile(r"^(\d{4})(\d{2})(\d{2})(?:T.*)?$")

# Unescaped comma inside a text list value
_LIST_SEPARATOR = re.compile(r"(?<!\\),")

# Folded continuation line (RFC 6350 section 3.2)
_FOLD = re.compile(r"\r?\n[ \t]")

# First PHOTO line of an unfolded card: optional group, parameters, value
_RAW_PHOTO = re.compile(
    r'^(?:[\w-]+\.)?PHOTO(?:;(?:[^:"\r\n]|"[^"]*")*)?:(.*?)\r?$',
    re.IGNORECASE | re.MULTILINE,
)


class CardError(Exception):
    """Base exception for card handling errors."""

    pass


class ParseError(CardError):
    """Raised when a raw record cannot be turned into a Contact."""

    def __init__(self, message: str, record_id: Optional[str] = None):
        super().__init__(message)
        self.record_id = record_id


def _text(value: Any) -> str:
    """Flatten a vobject structured field (string or list) into text."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value if v).strip()
    return str(value).strip()


def _split_list(value: Any) -> list[str]:
    """Split a comma separated text list, honouring backslash escapes."""
    if isinstance(value, (list, tuple)):
        # Already split and unescaped by vobject
        return [str(item).strip() for item in value if str(item).strip()]
    if not value:
        return []
    parts = _LIST_SEPARATOR.split(str(value))
    return [p.replace("\\,", ",").strip() for p in parts if p.strip()]


def _name_parts(value: Any) -> tuple[str, str]:
    """Return (given, family) from an N value, structured or raw."""
    if isinstance(value, str):
        # Untransformed "family;given;additional;prefix;suffix"
        fields = re.split(r"(?<!\\);", value)
        family = fields[0] if fields else ""
        given = fields[1] if len(fields) > 1 else ""
        return _text(_split_list(given)), _text(_split_list(family))
    return _text(getattr(value, "given", "")), _text(getattr(value, "family", ""))


def type_label(line: Any) -> str:
    """
    Build the type label for a TEL or EMAIL property.

    TYPE parameter values come first, followed by bare vCard 2.1 style
    parameters, in declaration order.

    Args:
        line: vobject ContentLine

    Returns:
        Parameter descriptions joined with ", ", or "" if there are none
    """
    descriptions: list[str] = []
    for value in line.params.get("TYPE", []):
        descriptions.extend(_split_list(str(value)))
    descriptions.extend(getattr(line, "singletonparams", []))
    return TYPE_LABEL_SEPARATOR.join(descriptions)


def parse_birthday(value: Any) -> date:
    """
    Convert a BDAY value into a date.

    Raises:
        ValueError: If the value is not a full calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    match = _BDAY_EXTENDED.match(text) or _BDAY_BASIC.match(text)
    if not match:
        raise ValueError(f"Unsupported birthday value: {text!r}")

    year, month, day = (int(part) for part in match.groups())
    return date(year, month, day)


def decode_photo(value: Any) -> bytes:
    """
    Turn a PHOTO value into raw bytes.

    Inline binary data is already decoded by vobject. Data URIs are
    base64-decoded; any other URI is kept as its UTF-8 text.
    """
    if isinstance(value, bytes):
        return value

    text = str(value).strip()
    if text.lower().startswith("data:") and ";base64," in text.lower():
        payload = text.split(",", 1)[1]
        return base64.b64decode(payload)
    return text.encode("utf-8")


def raw_photo_value(raw: str) -> Optional[str]:
    """
    Return the undecoded value of the first PHOTO line in a raw card.

    vobject treats PHOTO as a text list and keeps only the part before the
    first comma, which cuts a data URI in half.
    """
    match = _RAW_PHOTO.search(_FOLD.sub("", raw))
    return match.group(1).strip() if match else None


class CardParser:
    """
    Stateless vCard to Contact converter.

    Usage:
        parser = CardParser()

        try:
            contact = parser.parse(raw_text)
        except ParseError as e:
            logger.warning(f"Skipping card: {e}")
    """

    def __init__(self, allow_quoted_printable: bool = True):
        """
        Initialize the parser.

        Args:
            allow_quoted_printable: Accept vCard 2.1 quoted-printable lines.
        """
        self.allow_quoted_printable = allow_quoted_printable

    def _read_card(self, raw: str, record_id: str) -> Any:
        """Run vobject over the raw text and return the VCARD component."""
        if not raw or not raw.strip():
            raise ParseError("Empty card record", record_id)

        try:
            component = vobject.readOne(raw, allowQP=self.allow_quoted_printable)
        except StopIteration:
            raise ParseError("No vCard component found", record_id) from None
        except (VObjectError, ValueError, UnicodeError) as e:
            raise ParseError(f"Error decoding vCard: {e}", record_id) from e

        if component is None or (component.name or "").upper() != "VCARD":
            raise ParseError("Record is not a vCard", record_id)

        return component

    def parse(self, raw: str) -> Contact:
        """
        Parse one raw vCard record.

        Args:
            raw: Raw vCard text

        Returns:
            Contact built from the card

        Raises:
            ParseError: If the record is malformed or has no N property
        """
        uid = fingerprint(raw or "")
        card = self._read_card(raw, uid)
        contents = card.contents

        names = contents.get("n")
        if not names:
            raise ParseError("Card has no N property", uid)
        given_name, family_name = _name_parts(names[0].value)

        birthday = None
        if contents.get("bday"):
            try:
                birthday = parse_birthday(contents["bday"][0].value)
            except ValueError as e:
                # Partial and free-text birthdays leave the field unset
                logger.warning(f"Ignoring birthday of {uid[:12]}: {e}")

        phone_numbers = tuple(
            PhoneNumber(type=type_label(tel), number=_text(tel.value))
            for tel in contents.get("tel", [])
        )
        emails = tuple(
            Email(type=type_label(line), email=_text(line.value))
            for line in contents.get("email", [])
        )

        categories: set[str] = set()
        for line in contents.get("categories", []):
            categories.update(_split_list(line.value))

        photo = None
        if contents.get("photo"):
            value = contents["photo"][0].value
            if not isinstance(value, bytes):
                value = raw_photo_value(raw) or value
            try:
                data = decode_photo(value)
            except (binascii.Error, ValueError) as e:
                raise ParseError(f"Invalid photo data: {e}", uid) from e
            photo = Photo(data=data, media_type=DEFAULT_PHOTO_MEDIA_TYPE)

        contact = Contact(
            uid=uid,
            given_name=given_name,
            family_name=family_name,
            birthday=birthday,
            phone_numbers=phone_numbers,
            emails=emails,
            categories=frozenset(categories),
            photo=photo,
        )
        logger.debug(f"Found contact: {contact.full_name}")
        return contact


# Shared parser instance
DEFAULT_PARSER = CardParser()


def parse_card(raw: str) -> Contact:
    """Parse a raw record with the shared parser."""
    return DEFAULT_PARSER.parse(raw)
