"""
Snapbook Backend - Memory Ordering Rules
=========================================

What:  Pure functions implementing the memory display order, insertion keys
       and the move-up/move-down renumbering.
Who:   MemoryService (persistence) and ShareService (public view).

Ordering invariant:
    Display order is ascending `sort_order`, ties broken by `created_at`
    ascending.

Insertion:
    top    → min(existing keys, 0) - 1
    bottom → max(existing keys, 0) + 1
    Neither requires touching any other row.

Move:
    Swap two adjacent display positions, then assign dense keys 1..N to the
    whole list. Moving the first item up or the last item down is a no-op.

These helpers work on any object with `sort_order` and `created_at`
attributes, so they are tested without a database.
"""

from datetime import datetime
from typing import Iterable, List, Literal, Optional, Protocol, Sequence, TypeVar


class Orderable(Protocol):
    sort_order: int
    created_at: datetime


T = TypeVar("T", bound=Orderable)

Position = Literal["top", "bottom"]
Direction = Literal["up", "down"]


def display_order(memories: Iterable[T]) -> List[T]:
    """Returns a new list sorted by (sort_order, created_at)."""
    return sorted(memories, key=lambda m: (m.sort_order, m.created_at))


def next_sort_order(existing_keys: Iterable[int], position: Position) -> int:
    """
    Sort key for a new memory inserted at the top or bottom.

    >>> next_sort_order([], "top")
    -1
    >>> next_sort_order([3, 5], "top")
    -1
    >>> next_sort_order([-4, -2], "bottom")
    1
    >>> next_sort_order([1, 2, 3], "bottom")
    4
    """
    keys = list(existing_keys)
    if position == "top":
        return min([0, *keys]) - 1
    if position == "bottom":
        return max([0, *keys]) + 1
    raise ValueError(f"Unknown position '{position}'. Must be 'top' or 'bottom'.")


def target_index(index: int, direction: Direction) -> int:
    if direction == "up":
        return index - 1
    if direction == "down":
        return index + 1
    raise ValueError(f"Unknown direction '{direction}'. Must be 'up' or 'down'.")


def move(memories: Sequence[T], index: int, direction: Direction) -> Optional[List[T]]:
    """
    Moves the memory at display position `index` one step up or down.

    Args:
        memories:  Memories already in display order.
        index:     Position of the memory to move.
        direction: "up" (towards index 0) or "down".

    Returns:
        The reordered list with every item's `sort_order` rewritten to 1..N,
        or None when the move would leave the list (nothing is modified).
    """
    if not 0 <= index < len(memories):
        raise IndexError(f"Memory index {index} out of range for {len(memories)} memories")

    other = target_index(index, direction)
    if other < 0 or other >= len(memories):
        return None

    reordered = list(memories)
    reordered[index], reordered[other] = reordered[other], reordered[index]
    renumber(reordered)
    return reordered


def renumber(memories: Sequence[T]) -> None:
    """Assigns sort_order 1..N in the given order, in place."""
    for position, memory in enumerate(memories, start=1):
        memory.sort_order = position
