"""Target resolution: which tasks a command applies to.

Bulk commands ("all", "every", ...) take their tasks from the named
columns, else the named projects. Only tag and untag may fall through to
the whole board. Singular commands use the tasks named in the message, else
the best fuzzy title match for a handler-supplied fragment.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from src.interpreter.fuzzy import find_best_match
from src.interpreter.normalize import normalize

if TYPE_CHECKING:
    from uuid import UUID

    from src.interpreter.entities import Catalog, EntitySet
    from src.shared.types import Task

_BULK_WORDS = re.compile(r"\b(?:all|every|each|multiple|batch|bulk)\b")


def is_bulk(message: str) -> bool:
    """True when the message contains a whole-word bulk indicator."""
    return _BULK_WORDS.search(normalize(message)) is not None


def _dedupe(tasks: list[Task]) -> list[Task]:
    seen: set[UUID] = set()
    unique: list[Task] = []
    for task in tasks:
        if task.id not in seen:
            seen.add(task.id)
            unique.append(task)
    return unique


def structural_tasks(entities: EntitySet, catalog: Catalog) -> list[Task]:
    """Tasks in the named columns, else in the named projects."""
    if entities.columns:
        found = [t for c in entities.columns for t in catalog.tasks_in_column(c.id)]
        return _dedupe(found)
    if entities.projects:
        found = [t for p in entities.projects for t in catalog.tasks_in_project(p.id)]
        return _dedupe(found)
    return []


def bulk_tasks(
    entities: EntitySet,
    catalog: Catalog,
    *,
    whole_board: bool = False,
) -> list[Task]:
    tasks = structural_tasks(entities, catalog)
    if tasks or entities.columns or entities.projects:
        return tasks
    return list(catalog.tasks) if whole_board else []


def match_task(fragment: str | None, catalog: Catalog) -> Task | None:
    match = find_best_match(fragment, catalog.tasks, key=lambda t: t.title)
    return match.item if match else None


def singular_tasks(
    entities: EntitySet,
    catalog: Catalog,
    fragment: str | None = None,
) -> list[Task]:
    """Named tasks, else one fuzzy match for `fragment` (or the message)."""
    if entities.tasks:
        return list(entities.tasks)
    task = match_task(fragment or entities.raw_message, catalog)
    return [task] if task else []


def resolve_tasks(
    entities: EntitySet,
    catalog: Catalog,
    *,
    bulk: bool,
    fragment: str | None = None,
    whole_board: bool = False,
) -> list[Task]:
    if bulk:
        return bulk_tasks(entities, catalog, whole_board=whole_board)
    return singular_tasks(entities, catalog, fragment)
