"""Port interfaces - Layer boundary contracts.

Ports:
    TaskStorePort - Board reads and writes (interpreter hard dep)
"""

from src.ports.task_store_port import TaskStorePort

__all__ = [
    "TaskStorePort",
]
