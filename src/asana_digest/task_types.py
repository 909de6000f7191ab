"""Task and result-set types for Asana search results.

Defines Task (a parsed Asana task record) and ResultSet (the ordered,
gid-keyed collection that search queries accumulate into).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CustomField:
    """A custom field value as returned by the Asana API.

    Attributes:
        name: Field name as shown in Asana.
        enum_value_name: Label of the selected enum option, if any.
        display_value: Free-text rendering of the value, if any.
    """

    name: str
    enum_value_name: str | None = None
    display_value: str | None = None

    @property
    def resolved_value(self) -> str:
        """Enum option label if set, else the display value, else empty."""
        return self.enum_value_name or self.display_value or ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> CustomField:
        enum_value = data.get("enum_value")
        if not isinstance(enum_value, dict):
            enum_value = {}
        return cls(
            name=data.get("name") or "",
            enum_value_name=enum_value.get("name"),
            display_value=data.get("display_value"),
        )


@dataclass(frozen=True)
class Task:
    """Parsed Asana task.

    Attributes:
        gid: Asana global identifier.
        name: Task title.
        due_on: Due date (YYYY-MM-DD) without time, if set.
        due_at: Due instant (ISO-8601 UTC), if set.
        start_on: Start date (YYYY-MM-DD), if set.
        permalink_url: Link to the task in the Asana web app.
        projects: Names of projects the task belongs to, in API order.
        custom_fields: Custom field values attached to the task.
        assignee_name: Display name of the assignee, if any.
    """

    gid: str
    name: str
    due_on: str | None = None
    due_at: str | None = None
    start_on: str | None = None
    permalink_url: str | None = None
    projects: tuple[str, ...] = ()
    custom_fields: tuple[CustomField, ...] = ()
    assignee_name: str | None = None

    @property
    def project_name(self) -> str | None:
        """First associated project name, or None."""
        return self.projects[0] if self.projects else None

    def custom_field_value(self, name: str) -> str:
        """Resolved value of the first custom field named exactly ``name``."""
        for cf in self.custom_fields:
            if cf.name == name:
                return cf.resolved_value
        return ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        """Build a Task from an Asana API task dict.

        Null or missing fields become None or empty tuples.
        """
        projects = tuple(
            p.get("name") or ""
            for p in (data.get("projects") or [])
            if isinstance(p, dict)
        )
        custom_fields = tuple(
            CustomField.from_api(cf)
            for cf in (data.get("custom_fields") or [])
            if isinstance(cf, dict)
        )
        assignee = data.get("assignee") or {}
        return cls(
            gid=str(data.get("gid") or ""),
            name=data.get("name") or "",
            due_on=data.get("due_on"),
            due_at=data.get("due_at"),
            start_on=data.get("start_on"),
            permalink_url=data.get("permalink_url"),
            projects=projects,
            custom_fields=custom_fields,
            assignee_name=assignee.get("name") if isinstance(assignee, dict) else None,
        )


@dataclass
class ResultSet:
    """Ordered collection of tasks, unique by gid.

    The first occurrence of a gid wins and keeps its position; later
    duplicates are ignored.
    """

    _tasks: dict[str, Task] = field(default_factory=dict)

    @classmethod
    def of(cls, tasks: Iterable[Task]) -> ResultSet:
        rs = cls()
        rs.extend(tasks)
        return rs

    def add(self, task: Task) -> bool:
        """Add a task. Returns False if its gid was already present."""
        if task.gid in self._tasks:
            return False
        self._tasks[task.gid] = task
        return True

    def extend(self, tasks: Iterable[Task]) -> int:
        """Add tasks in order. Returns the number newly added."""
        return sum(1 for t in tasks if self.add(t))

    def union(self, other: ResultSet) -> ResultSet:
        """Return a new set with this set's tasks followed by other's new ones."""
        merged = ResultSet(dict(self._tasks))
        merged.extend(other)
        return merged

    @property
    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __contains__(self, gid: object) -> bool:
        return gid in self._tasks
