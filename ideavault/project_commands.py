"""Project commands for ideavault CLI."""

from cyclopts import App

from ideavault.output import print_entities, print_entity, split_csv

project_app = App(name="project", help="Manage projects and their linked ideas")


@project_app.command
def new(
    title: str,
    description: str | None = None,
    tags: str = "",
    status: str | None = None,
    milestone: str | None = None,
    url: str | None = None,
    repo: str | None = None,
    ideas: str = "",
) -> None:
    """Create a new project.

    Args:
        title: Project title
        description: Optional description
        tags: Comma-separated tags
        status: Initial status (defaults to Planning)
        milestone: Current milestone
        url: Project URL
        repo: Repository URL
        ideas: Comma-separated IDs of ideas to link
    """
    from ideavault.cli import get_vault

    project = get_vault().create_project(
        title,
        description=description,
        tags=split_csv(tags),
        status=status,
        milestone=milestone,
        url=url,
        repo_url=repo,
        idea_ids=split_csv(ideas),
    )
    print(f"Created project {project.id}: {project.title}")


@project_app.command(name="list")
def list_projects(status: str | None = None, tag: str | None = None, json: bool = False) -> None:
    """List projects with optional filtering."""
    from ideavault.cli import get_vault

    print_entities(get_vault().list_projects(status=status, tag=tag), "project(s)", as_json=json)


@project_app.command
def show(project_id: str, json: bool = False) -> None:
    """Show full details of a project."""
    from ideavault.cli import get_vault

    print_entity(get_vault().get_project(project_id), as_json=json)


@project_app.command
def ideas(project_id: str, json: bool = False) -> None:
    """List the ideas linked to a project."""
    from ideavault.cli import get_vault

    print_entities(get_vault().project_ideas(project_id), "idea(s)", as_json=json)


@project_app.command
def tasks(project_id: str, json: bool = False) -> None:
    """List the tasks linked to a project."""
    from ideavault.cli import get_vault

    print_entities(get_vault().project_tasks(project_id), "task(s)", as_json=json)


@project_app.command
def update(
    project_id: str,
    title: str | None = None,
    description: str | None = None,
    status: str | None = None,
    tags: str | None = None,
    milestone: str | None = None,
    url: str | None = None,
    repo: str | None = None,
    add_tag: str = "",
    remove_tag: str = "",
    clear: str = "",
) -> None:
    """Update a project.

    Args:
        project_id: ID of the project
        title: New title
        description: New description
        status: New status
        tags: Comma-separated tags replacing the current ones
        milestone: New milestone
        url: New project URL
        repo: New repository URL
        add_tag: Comma-separated tags to add
        remove_tag: Comma-separated tags to remove
        clear: Comma-separated fields to clear (description, milestone, url, repo_url, tags)
    """
    from ideavault.cli import get_vault

    project = get_vault().update_project(
        project_id,
        title=title,
        description=description,
        status=status,
        tags=split_csv(tags) if tags is not None else None,
        milestone=milestone,
        url=url,
        repo_url=repo,
        add_tags=split_csv(add_tag),
        remove_tags=split_csv(remove_tag),
        clear=split_csv(clear),
    )
    print(f"Updated project {project.id}: {project.title}")


@project_app.command
def link(project_id: str, *idea_ids: str) -> None:
    """Link one or more ideas to a project."""
    from ideavault.cli import get_vault

    vault = get_vault()
    for idea_id in idea_ids:
        vault.link_idea_to_project(project_id, idea_id)
    print(f"Linked {len(idea_ids)} idea(s) to project {project_id}")


@project_app.command
def unlink(project_id: str, *idea_ids: str) -> None:
    """Unlink one or more ideas from a project."""
    from ideavault.cli import get_vault

    vault = get_vault()
    for idea_id in idea_ids:
        vault.unlink_idea_from_project(project_id, idea_id)
    print(f"Unlinked {len(idea_ids)} idea(s) from project {project_id}")


@project_app.command
def delete(project_id: str) -> None:
    """Delete a project and clear references to it from ideas and tasks."""
    from ideavault.cli import get_vault

    project = get_vault().delete_project(project_id)
    print(f"Deleted project: {project.title}")
