"""
cardbook.card - vCard model, parsing and filtering

Contains the Contact data model, the vobject based parser and the
qualification filter applied before publication.
"""

from cardbook.card.contact import (
    DEFAULT_PHOTO_MEDIA_TYPE,
    Contact,
    Email,
    PhoneNumber,
    Photo,
    fingerprint,
)
from cardbook.card.filter import qualifies
from cardbook.card.parser import (
    DEFAULT_PARSER,
    CardError,
    CardParser,
    ParseError,
    parse_card,
)

__all__ = [
    "Contact",
    "PhoneNumber",
    "Email",
    "Photo",
    "DEFAULT_PHOTO_MEDIA_TYPE",
    "fingerprint",
    "qualifies",
    "CardParser",
    "CardError",
    "ParseError",
    "DEFAULT_PARSER",
    "parse_card",
]
