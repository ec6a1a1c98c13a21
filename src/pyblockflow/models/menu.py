"""Command-menu entries managed through the menu host."""

from dataclasses import dataclass

__all__ = ["MenuEntry"]


@dataclass(frozen=True)
class MenuEntry:
    """One node of the hierarchical command menu.

    Leaf entries are keyed by registration key and hang off a single
    reserved root entry.
    """

    id: str
    title: str
    contexts: tuple[str, ...] = ("all",)
    document_url_patterns: tuple[str, ...] = ()
    parent_id: str | None = None
