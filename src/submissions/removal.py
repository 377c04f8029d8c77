"""Decision logic for removing a tag.

The interactive prompt lives in the CLI; this module only decides what a
given selection and confirmation mean.
"""

from dataclasses import dataclass
from enum import Enum


class RemovalAction(str, Enum):
    """What to do with a removal request."""

    REMOVE = "REMOVE"
    CANCELLED = "CANCELLED"
    INVALID_SELECTION = "INVALID_SELECTION"
    NO_TAGS = "NO_TAGS"


@dataclass(frozen=True)
class RemovalPlan:
    """Outcome of planning a removal.

    Attributes:
        action: Decided action.
        tag: Resolved tag, when the selection named one.
        message: Human-readable explanation.
    """

    action: RemovalAction
    tag: str | None
    message: str


def resolve_selection(available_tags: list[str], selection: str) -> str | None:
    """Resolve a tag name or 1-based index into the sorted tag list.

    Args:
        available_tags: Tags that can be removed.
        selection: Tag name, or a number shown next to it in the listing.

    Returns:
        The selected tag, or None if the selection matches nothing.
    """
    choice = selection.strip()
    ordered = sorted(available_tags)
    if choice.isdigit():
        index = int(choice)
        return ordered[index - 1] if 1 <= index <= len(ordered) else None
    return choice if choice in ordered else None


def plan_removal(
    available_tags: list[str], selection: str, confirmed: bool
) -> RemovalPlan:
    """Decide whether a removal request should proceed.

    Args:
        available_tags: Tags currently in the index.
        selection: Tag name or 1-based index.
        confirmed: Whether the user confirmed the removal.

    Returns:
        RemovalPlan describing the action.
    """
    if not available_tags:
        return RemovalPlan(RemovalAction.NO_TAGS, None, "No tags found to remove.")

    tag = resolve_selection(available_tags, selection)
    if tag is None:
        return RemovalPlan(
            RemovalAction.INVALID_SELECTION,
            None,
            f"Invalid selection '{selection}'. Choose a listed tag or its number.",
        )

    if not confirmed:
        return RemovalPlan(RemovalAction.CANCELLED, tag, "Removal cancelled.")

    return RemovalPlan(RemovalAction.REMOVE, tag, f"Removing tag '{tag}'.")
