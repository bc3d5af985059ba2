"""CLI output formatting functions.

This module contains functions for displaying published contacts, parse
diagnostics and refresh statistics on the command line.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from cardbook.card.contact import Contact
    from cardbook.refresh.diagnostics import ParseDiagnostic
    from cardbook.refresh.scheduler import RefreshStats


def format_contact(contact: "Contact", verbose: bool = False) -> list[str]:
    """
    Render one contact as indented lines.

    Args:
        contact: Contact to render
        verbose: Include the fingerprint and photo size

    Returns:
        Lines ready for click.echo
    """
    lines = [click.style(contact.full_name, bold=True)]

    if contact.birthday:
        lines.append(f"  Birthday: {contact.birthday.isoformat()}")
    for phone in contact.phone_numbers:
        label = f" ({phone.type})" if phone.type else ""
        lines.append(f"  Phone: {phone.number}{label}")
    for email in contact.emails:
        label = f" ({email.type})" if email.type else ""
        lines.append(f"  Email: {email.email}{label}")
    if contact.categories:
        lines.append(f"  Categories: {', '.join(sorted(contact.categories))}")

    if verbose:
        if contact.photo:
            lines.append(
                f"  Photo: {len(contact.photo.data)} bytes ({contact.photo.media_type})"
            )
        lines.append(f"  ID: {contact.uid}")

    return lines


def show_contacts(contacts: Sequence["Contact"], verbose: bool = False) -> None:
    """Display the published contacts."""
    if not contacts:
        click.echo("No qualified contacts.")
        return

    click.echo(f"\n=== Contacts ({len(contacts)}) ===\n")
    for contact in contacts:
        for line in format_contact(contact, verbose=verbose):
            click.echo(line)


def show_diagnostics(diagnostics: Sequence["ParseDiagnostic"], limit: int = 10) -> None:
    """Display the most recent parse failures."""
    if not diagnostics:
        return

    click.echo(
        click.style(f"\n=== Skipped Records ({len(diagnostics)}) ===", fg="yellow")
    )
    for diagnostic in list(diagnostics)[-limit:]:
        click.echo(f"  {diagnostic.record_id[:12]}: {diagnostic.reason}")
        click.echo(f"    {diagnostic.excerpt}")
    if len(diagnostics) > limit:
        click.echo(f"  ... and {len(diagnostics) - limit} more")


def show_stats(stats: "RefreshStats") -> None:
    """Display a one-line summary of the last cycle."""
    click.echo(
        f"\nRead {stats.records_read} record(s): {stats.contacts_parsed} parsed, "
        f"{stats.parse_failures} skipped, {stats.contacts_kept} kept."
    )
