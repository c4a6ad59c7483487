"""Configuration commands for ideavault CLI."""

from cyclopts import App

from ideavault.config import DEFAULTS, check_key, get_config

config_app = App(name="config", help="Manage configuration (data_dir, backup.enabled, backup.max_backups)")


def _scope(global_: bool) -> str:
    return "global" if global_ else "local"


@config_app.command
def set(key: str, value: str, global_: bool = False) -> None:
    """Set a configuration setting.

    Args:
        key: data_dir, backup.enabled or backup.max_backups
        value: New value (a path, a boolean or a non-negative count)
        global_: Write to ~/.ideavault/config.yaml instead of the local file
    """
    stored = get_config(use_global=global_).set(key, value)
    print(f"Set {key} = {stored} ({_scope(global_)})")


@config_app.command
def unset(key: str, global_: bool = False) -> None:
    """Remove a setting so the next lookup falls back to global config or the default.

    Args:
        key: Configuration key
        global_: Remove from the global file instead of the local file
    """
    config = get_config(use_global=global_)
    config.unset(key)
    if key in DEFAULTS:
        value, source = config.resolved()[key]
        print(f"Unset {key} ({_scope(global_)}); now {value} ({source})")
    else:
        print(f"Unset {key} ({_scope(global_)})")


@config_app.command
def get(key: str, global_: bool = False) -> None:
    """Show the effective value of a setting and where it comes from.

    Args:
        key: data_dir, backup.enabled or backup.max_backups
        global_: Ignore the local file
    """
    check_key(key)
    value, source = get_config(use_global=global_).resolved()[key]
    print(f"{key} = {value} ({source})")


@config_app.command(name="list")
def list_config(global_: bool = False) -> None:
    """List every setting with its effective value, then the storage paths it resolves to.

    Args:
        global_: Ignore the local file
    """
    config = get_config(use_global=global_)
    print(f"Config file: {config.config_file}\n")
    for key, (value, source) in config.resolved().items():
        print(f"{key} = {value} ({source})")

    unknown = {key: value for key, value in config.list().items() if key not in DEFAULTS}
    for key, value in unknown.items():
        print(f"{key} = {value} (unrecognised, ignored)")

    settings = config.settings()
    print(f"\nData directory: {settings.data_dir}")
    if settings.backup_enabled:
        print(f"Backups: {settings.data_dir / 'backups'} (keeping {settings.max_backups})")
    else:
        print("Backups: disabled")
