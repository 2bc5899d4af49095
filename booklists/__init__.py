"""booklists - merge exported book lists into a local catalog.

The import engine detects list-name and book-identity collisions, applies a
caller-chosen resolution strategy and records a snapshot so the whole import
can be undone.

Usage:
    booklists preview lists.json
    booklists import lists.json --list-action rename --snapshot-out undo.json
    booklists undo undo.json
"""

__version__ = "0.1.0"
