"""Idea commands for ideavault CLI."""

from cyclopts import App

from ideavault.output import print_entities, print_entity, split_csv

idea_app = App(name="idea", help="Manage ideas")


@idea_app.command
def new(
    title: str,
    description: str | None = None,
    tags: str = "",
    status: str | None = None,
    project: str | None = None,
) -> None:
    """Create a new idea.

    Args:
        title: Idea title
        description: Optional description
        tags: Comma-separated tags
        status: Initial status (defaults to Brainstorming)
        project: ID of a project to link the idea to
    """
    from ideavault.cli import get_vault

    idea = get_vault().create_idea(
        title, description=description, tags=split_csv(tags), status=status, project_id=project
    )
    print(f"Created idea {idea.id}: {idea.title}")


@idea_app.command(name="list")
def list_ideas(
    status: str | None = None,
    tag: str | None = None,
    project: str | None = None,
    json: bool = False,
) -> None:
    """List ideas with optional filtering."""
    from ideavault.cli import get_vault

    ideas = get_vault().list_ideas(status=status, tag=tag, project_id=project)
    print_entities(ideas, "idea(s)", as_json=json)


@idea_app.command
def show(idea_id: str, json: bool = False) -> None:
    """Show full details of an idea."""
    from ideavault.cli import get_vault

    print_entity(get_vault().get_idea(idea_id), as_json=json)


@idea_app.command
def update(
    idea_id: str,
    title: str | None = None,
    description: str | None = None,
    status: str | None = None,
    tags: str | None = None,
    add_tag: str = "",
    remove_tag: str = "",
    clear: str = "",
) -> None:
    """Update an idea.

    Args:
        idea_id: ID of the idea
        title: New title
        description: New description
        status: New status
        tags: Comma-separated tags replacing the current ones
        add_tag: Comma-separated tags to add
        remove_tag: Comma-separated tags to remove
        clear: Comma-separated fields to clear (description, tags)
    """
    from ideavault.cli import get_vault

    idea = get_vault().update_idea(
        idea_id,
        title=title,
        description=description,
        status=status,
        tags=split_csv(tags) if tags is not None else None,
        add_tags=split_csv(add_tag),
        remove_tags=split_csv(remove_tag),
        clear=split_csv(clear),
    )
    print(f"Updated idea {idea.id}: {idea.title}")


@idea_app.command
def delete(idea_id: str) -> None:
    """Delete an idea and remove it from linked projects and tasks."""
    from ideavault.cli import get_vault

    idea = get_vault().delete_idea(idea_id)
    print(f"Deleted idea: {idea.title}")
