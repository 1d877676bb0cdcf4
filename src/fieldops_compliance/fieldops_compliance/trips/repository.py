from __future__ import annotations

from typing import Optional, Protocol

from .model import TransportTask


class TaskRepository(Protocol):
    def get_by_id(self, task_id: int) -> Optional[TransportTask]:
        raise NotImplementedError

    def save(self, task: TransportTask) -> None:
        raise NotImplementedError
