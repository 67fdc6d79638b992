"""
tasks/models.py -- Domain dataclass for a tracked task.

Pure data container with zero logic. Ownership checks live in tasks/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Task:
    """A to-do item owned by exactly one user.

    id is None before the record is written to the database.
    """

    user_id: int
    title: str
    description: Optional[str] = None
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""
