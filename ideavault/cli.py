"""CLI for ideavault."""

import sys
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from ideavault.backends import JsonFileBackend
from ideavault.config import get_config
from ideavault.config_commands import config_app
from ideavault.errors import IdeaVaultError
from ideavault.idea_commands import idea_app
from ideavault.output import print_search_results, split_csv
from ideavault.project_commands import project_app
from ideavault.task_commands import task_app
from ideavault.vault import Vault

logger = structlog.get_logger()

app = App(
    help="IdeaVault - Manage ideas, projects and tasks from the command line",
)

app.command(idea_app)
app.command(project_app)
app.command(task_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_vault() -> Vault:
    """Get a vault backed by the configured data directory."""
    settings = get_config().settings()
    logger.debug("Opening vault", data_dir=str(settings.data_dir))
    backend = JsonFileBackend(
        settings.data_dir,
        backup_enabled=settings.backup_enabled,
        max_backups=settings.max_backups,
    )
    return Vault(backend)


@app.command
def search(
    query: str = "",
    ideas: bool = False,
    projects: bool = False,
    tasks: bool = False,
    tags_only: bool = False,
    tags: str = "",
    status: str | None = None,
    date_from: Annotated[str | None, Parameter(name="--from")] = None,
    date_to: Annotated[str | None, Parameter(name="--to")] = None,
    json: bool = False,
) -> None:
    """Search across ideas, projects and tasks.

    Args:
        query: Text to look for in titles, descriptions and tags (empty matches everything)
        ideas: Search ideas only
        projects: Search projects only
        tasks: Search tasks only
        tags_only: Match the query against tags only
        tags: Comma-separated tags every result must carry
        status: Only entities with this status
        date_from: Created on or after this date (YYYY-MM-DD)
        date_to: Created on or before this date (YYYY-MM-DD)
        json: Print results as JSON
    """
    scope = "all"
    if tags_only:
        scope = "tags"
    elif ideas:
        scope = "ideas"
    elif projects:
        scope = "projects"
    elif tasks:
        scope = "tasks"

    results = get_vault().search(
        query,
        scope=scope,
        with_tags=split_csv(tags),
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    print_search_results(results, as_json=json)


@app.command(name="tags")
def list_tags() -> None:
    """List every tag in use with the number of entities carrying it."""
    counts = get_vault().tag_counts()
    if not counts:
        print("No tags found")
        return
    for tag, count in counts.items():
        print(f"{tag} ({count})")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    try:
        app(tokens)
    except IdeaVaultError as e:
        logger.debug("Command failed", error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def run() -> None:
    """Console script entry point."""
    app.meta()


if __name__ == "__main__":
    run()
