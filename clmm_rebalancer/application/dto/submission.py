from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CreatedObject:
    object_id: str
    object_type: str


@dataclass(frozen=True)
class SubmissionResult:
    digest: str
    success: bool
    created_objects: tuple[CreatedObject, ...] = ()
    error: str | None = None

    def find_created(self, object_type: str) -> str | None:
        for created in self.created_objects:
            if created.object_type == object_type:
                return created.object_id
        return None
