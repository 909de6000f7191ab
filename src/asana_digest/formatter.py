"""Slack text formatters for the daily task digest.

Pure functions that render a target date and a list of tasks into a
single mrkdwn text block.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import lru_cache

import icu

from asana_digest.config import DisplayConfig
from asana_digest.task_types import Task


@lru_cache(maxsize=1)
def _collator() -> icu.Collator:
    return icu.Collator.createInstance(icu.Locale("ja_JP"))


def project_sort_key(name: str | None) -> bytes:
    """Collation key for project names in Japanese (ja_JP) order.

    Kana sort in gojūon order regardless of script or width, and kanji follow
    the JIS reading order (英語 < 応用情報 < 研究). A missing name sorts first.
    """
    return _collator().getSortKey(name or "")


def build_field_labels(task: Task, field_names: Iterable[str]) -> str:
    """Render the bracketed custom-field suffix, e.g. ' [午前I:80 / 午後I:A]'.

    Fields without a value are omitted; returns '' when none has a value.
    """
    parts = []
    for name in field_names:
        value = task.custom_field_value(name)
        if value:
            parts.append(f"{name}:{value}")
    return f" [{' / '.join(parts)}]" if parts else ""


def format_task_line(task: Task, display: DisplayConfig | None = None) -> str:
    """Render one task as '・Project / Task [labels] <url|open>'."""
    display = display or DisplayConfig()
    project = task.project_name or display.no_project_label
    labels = build_field_labels(task, display.field_names)
    link = f" <{task.permalink_url}|{display.link_label}>" if task.permalink_url else ""
    return f"・{project} / {task.name}{labels}{link}"


def format_due_message(
    date_str: str,
    tasks: Iterable[Task],
    display: DisplayConfig | None = None,
) -> str:
    """Format the 'due on date' block, keeping query order.

    Args:
        date_str: Target date label (e.g. '2025-08-15').
        tasks: Tasks due on that date.
        display: Rendering settings.

    Returns:
        Multi-line text, or a one-line 'none' message when empty.
    """
    items = list(tasks)
    if not items:
        return f"【{date_str} 期日のタスク】なし"
    lines = [format_task_line(t, display) for t in items]
    return "\n".join([f"【{date_str} が期日のタスク】", *lines])


def format_start_message(
    date_str: str,
    tasks: Iterable[Task],
    display: DisplayConfig | None = None,
) -> str:
    """Format the 'starting on date' block, sorted by project name."""
    items = sorted(tasks, key=lambda t: project_sort_key(t.project_name))
    if not items:
        return f"【{date_str} に開始するタスク】なし"
    lines = [format_task_line(t, display) for t in items]
    return "\n".join([f"【{date_str} に開始するタスク】", *lines])
