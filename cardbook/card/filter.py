"""
Qualification filter for parsed contacts.

A contact is published only when it has a full name, at least one way to
reach or remember it (birthday, email or phone number), and, when a match
category is configured, that category among its labels.
"""

from typing import Optional

from cardbook.card.contact import Contact


def qualifies(contact: Contact, match_category: Optional[str] = "") -> bool:
    """
    Decide whether a contact should be published.

    Args:
        contact: Parsed contact
        match_category: Category the contact must carry. None or an empty
            (or whitespace-only) string disables the category restriction.

    Returns:
        True if the contact qualifies, False otherwise
    """
    match = (match_category or "").strip()

    if not contact.has_full_name():
        return False

    if not (
        contact.has_birthday() or contact.has_emails() or contact.has_phone_numbers()
    ):
        return False

    return not match or contact.of_category(match)
