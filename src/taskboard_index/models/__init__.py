from .task import COMPLETED, PENDING, TaskIndex, TaskRecord

__all__ = [
    "TaskRecord",
    "TaskIndex",
    "PENDING",
    "COMPLETED",
]
