"""IdeaVault - ideas, projects and tasks kept in local files."""

__version__ = "0.1.0"
