"""
cardbook - Periodic vCard address book loader.

Fetches raw vCard records from a directory or remote collection, parses
them into contacts, keeps the qualified ones, and publishes the result
for concurrent readers.
"""

__version__ = "0.1.0"
