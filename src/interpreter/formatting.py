"""Human-readable and JSON-ready renderings of board entities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.interpreter.entities import Catalog, EntitySet
    from src.shared.types import Column, Task

LIST_PREVIEW_SIZE = 15

HELP_TEXT = """## I can help you manage tasks with natural language!

### Search Tasks
• "Show all tasks"
• "Show tasks in To Do column"
• "Find high priority tasks"
• "What's overdue?"
• "Show tasks in [project name]"
• "Show Bug tasks"

### Create Tasks
• "Create task called [title] in [column]"
• "Add a new task [title]"

### Update Tasks
• "Move [task] to Done"
• "Add tag Bug to [task]"
• "Add label Bug to all tasks in To Do"
• "Set priority high for [task]"
• "Mark [task] as done"
• "Rename [task] to [new title]"

### Delete Tasks
• "Delete task [title]"
• Deleting several tasks at once needs an explicit confirmation

### Bulk Operations
• "Add tag Bug to all To Do tasks"
• "Move all tasks in Review to Done"
• "Before all To Do tasks add 'Name - '"
• "After all Done tasks add ' - Complete'"

### Info
• "Board summary"
• "How many tasks?"

Just type naturally and I'll try to understand!"""

UNKNOWN_TEXT = (
    "I'm not sure what you want to do. Try being more specific or say \"help\" "
    "to see what I can do!\n\n"
    "**Quick examples:**\n"
    "• \"Add tag Bug to all tasks in To Do\"\n"
    "• \"Show all high priority tasks\"\n"
    "• \"Move task X to Done\"\n"
    "• \"Create task called Fix bug in To Do\""
)


def format_task(task: Task, catalog: Catalog) -> str:
    column = catalog.column_of(task)
    project = catalog.project_of(task)
    labels = catalog.label_names(task)
    label_text = f" [{', '.join(labels)}]" if labels else ""
    due_text = f" (Due: {task.due_date.isoformat()})" if task.due_date else ""
    column_name = column.name if column else "Unknown"
    project_name = project.name if project else "Unknown"
    return (
        f'• "{task.title}" in {column_name} ({project_name})'
        f"{label_text}{due_text} - {task.priority.value} priority"
    )


def format_task_list(tasks: list[Task], catalog: Catalog, title: str = "Tasks") -> str:
    """Markdown listing: header with total, first 15 tasks, overflow note."""
    if not tasks:
        return f"No {title.lower()} found."

    lines = [format_task(t, catalog) for t in tasks[:LIST_PREVIEW_SIZE]]
    text = f"**{title}** ({len(tasks)} found):\n\n" + "\n".join(lines)
    if len(tasks) > LIST_PREVIEW_SIZE:
        text += f"\n\n...and {len(tasks) - LIST_PREVIEW_SIZE} more."
    return text


def serialize_task(task: Task, catalog: Catalog) -> dict[str, Any]:
    column = catalog.column_of(task)
    project = catalog.project_of(task)
    return {
        "id": str(task.id),
        "title": task.title,
        "priority": task.priority.value,
        "position": task.position,
        "description": task.description,
        "due_date": task.due_date.isoformat() if task.due_date else None,
        "column_id": str(task.column_id),
        "column_name": column.name if column else None,
        "project_id": str(project.id) if project else None,
        "project_name": project.name if project else None,
        "labels": catalog.label_names(task),
    }


def column_label(column: Column, catalog: Catalog) -> str:
    """'"Done" column (Website)' style reference used in confirmations."""
    project = catalog.project_for_column(column)
    suffix = f" ({project.name})" if project else ""
    return f'"{column.name}" column{suffix}'


def context_suffix(entities: EntitySet) -> str:
    """' in "X" column' / ' in "P" project' for bulk confirmations."""
    if entities.columns:
        return f' in "{entities.columns[0].name}" column'
    if entities.projects:
        return f' in "{entities.projects[0].name}" project'
    return ""


def format_summary(
    project_counts: list[tuple[str, int]],
    *,
    total: int,
    overdue: int,
    due_today: int,
    high_priority: int,
) -> str:
    lines = [
        "## Project Summary",
        "",
        f"**Projects:** {len(project_counts)}",
        f"**Total Tasks:** {total}",
        f"**Overdue:** {overdue}",
        f"**Due Today:** {due_today}",
        f"**High Priority:** {high_priority}",
        "",
        "### Projects:",
    ]
    lines.extend(f"• **{name}**: {count} tasks" for name, count in project_counts)
    return "\n".join(lines)
