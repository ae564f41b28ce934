"""
Sibling ordering: positions of modules in a course, lessons in a module,
answers in a question.
"""
from typing import Iterable, Sequence

from learnhub.utils.exceptions import ResourceNotFoundException


def next_order_index(sibling_indices: Iterable[int]) -> int:
    """
    Position for a new sibling appended after the existing ones.

    >>> next_order_index([])
    0
    >>> next_order_index([0, 1, 3])
    4
    """
    return max(sibling_indices, default=-1) + 1


def reorder(sibling_ids: Sequence[str], sibling_id: str, new_index: int) -> list[tuple[str, int]]:
    """
    Move one sibling to ``new_index`` and renumber every sibling 0..n-1.

    Args:
        sibling_ids: Sibling ids in their current order
        sibling_id: The sibling being moved
        new_index: Target position, clamped into range

    Returns:
        (id, order_index) for every sibling, in the new order
    """
    if sibling_id not in sibling_ids:
        raise ResourceNotFoundException(f"Sibling not found: {sibling_id}")

    ordered = [s for s in sibling_ids if s != sibling_id]
    new_index = max(0, min(new_index, len(ordered)))
    ordered.insert(new_index, sibling_id)
    return [(s, index) for index, s in enumerate(ordered)]
