"""
Task ID generation utilities.
"""

import secrets
from typing import Iterable, Optional, Set


def generate_task_id() -> int:
    """
    Generate a cryptographically random unsigned 32-bit task ID.

    Returns:
        Integer in [0, 2**32)
    """
    return secrets.randbits(32)


class TaskIdSource:
    """
    Issues task IDs that are unique within one scan or update.

    IDs already present in the index (``reserved``) and IDs issued earlier by
    this source are re-drawn on collision.
    """

    def __init__(self, reserved: Optional[Iterable[int]] = None) -> None:
        self._issued: Set[int] = set(reserved or ())

    def next_id(self) -> int:
        new_id = generate_task_id()
        while new_id in self._issued:
            new_id = generate_task_id()
        self._issued.add(new_id)
        return new_id

    def __contains__(self, task_id: int) -> bool:
        return task_id in self._issued
