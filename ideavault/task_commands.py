"""Task commands for ideavault CLI."""

from cyclopts import App

from ideavault.output import print_entities, print_entity, split_csv

task_app = App(name="task", help="Manage tasks")


@task_app.command
def new(
    title: str,
    description: str | None = None,
    tags: str = "",
    status: str | None = None,
    priority: str | None = None,
    due: str | None = None,
    project: str | None = None,
    idea: str | None = None,
) -> None:
    """Create a new task.

    Args:
        title: Task title
        description: Optional description
        tags: Comma-separated tags (contexts)
        status: Initial status (defaults to todo)
        priority: low, medium, high or urgent (defaults to medium)
        due: Due date (YYYY-MM-DD)
        project: ID of a project to link
        idea: ID of an idea to link
    """
    from ideavault.cli import get_vault

    task = get_vault().create_task(
        title,
        description=description,
        tags=split_csv(tags),
        status=status,
        priority=priority,
        due_date=due,
        project_id=project,
        idea_id=idea,
    )
    print(f"Created task {task.id}: {task.title}")


@task_app.command(name="list")
def list_tasks(
    status: str | None = None,
    priority: str | None = None,
    tag: str | None = None,
    project: str | None = None,
    idea: str | None = None,
    overdue: bool = False,
    json: bool = False,
) -> None:
    """List tasks with optional filtering."""
    from ideavault.cli import get_vault

    tasks = get_vault().list_tasks(
        status=status, priority=priority, tag=tag, project_id=project, idea_id=idea, overdue=overdue
    )
    print_entities(tasks, "task(s)", as_json=json)


@task_app.command
def show(task_id: str, json: bool = False) -> None:
    """Show full details of a task."""
    from ideavault.cli import get_vault

    print_entity(get_vault().get_task(task_id), as_json=json)


@task_app.command
def update(
    task_id: str,
    title: str | None = None,
    description: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    due: str | None = None,
    tags: str | None = None,
    add_tag: str = "",
    remove_tag: str = "",
    clear: str = "",
) -> None:
    """Update a task.

    Args:
        task_id: ID of the task
        title: New title
        description: New description
        status: New status
        priority: New priority
        due: New due date (YYYY-MM-DD)
        tags: Comma-separated tags replacing the current ones
        add_tag: Comma-separated tags to add
        remove_tag: Comma-separated tags to remove
        clear: Comma-separated fields to clear (description, due_date, tags)
    """
    from ideavault.cli import get_vault

    task = get_vault().update_task(
        task_id,
        title=title,
        description=description,
        status=status,
        priority=priority,
        due_date=due,
        tags=split_csv(tags) if tags is not None else None,
        add_tags=split_csv(add_tag),
        remove_tags=split_csv(remove_tag),
        clear=split_csv(clear),
    )
    print(f"Updated task {task.id}: {task.title}")


@task_app.command
def link_project(task_id: str, project_id: str) -> None:
    """Link a task to a project, replacing any previous project."""
    from ideavault.cli import get_vault

    get_vault().link_task_to_project(task_id, project_id)
    print(f"Linked task {task_id} to project {project_id}")


@task_app.command
def link_idea(task_id: str, idea_id: str) -> None:
    """Link a task to an idea, replacing any previous idea."""
    from ideavault.cli import get_vault

    get_vault().link_task_to_idea(task_id, idea_id)
    print(f"Linked task {task_id} to idea {idea_id}")


@task_app.command
def unlink_project(task_id: str) -> None:
    """Unlink a task from its project."""
    from ideavault.cli import get_vault

    get_vault().unlink_task_from_project(task_id)
    print(f"Unlinked task {task_id} from project")


@task_app.command
def unlink_idea(task_id: str) -> None:
    """Unlink a task from its idea."""
    from ideavault.cli import get_vault

    get_vault().unlink_task_from_idea(task_id)
    print(f"Unlinked task {task_id} from idea")


@task_app.command
def delete(task_id: str) -> None:
    """Delete a task."""
    from ideavault.cli import get_vault

    task = get_vault().delete_task(task_id)
    print(f"Deleted task: {task.title}")
