import platform
import sys
from typing import Optional, Tuple

import click

from . import __version__
from .config import AppConfig, AppConfigManager, ConfigStore, StorePaths, TokenKind
from .errors import ClaudeSwitchError
from .shell_integration import ShellIntegration
from .switcher import Outcome, StatusReport, SwitchResult, SwitchWorkflow, format_timestamp
from .token_supplier import TokenSupplier
from .utils import (
    configure_logging,
    error_message,
    get_file_permissions,
    info_message,
    safe_echo,
    success_message,
    warning_message,
)


class AliasedGroup(click.Group):
    """Group that also accepts the one-letter shortcuts of the main commands."""

    aliases = {"a": "anthropic", "g": "glm", "s": "status"}

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


def _load_app_config() -> AppConfig:
    return AppConfigManager().load()


def _make_store(app_config: Optional[AppConfig] = None) -> ConfigStore:
    if app_config is None:
        app_config = _load_app_config()
    return ConfigStore(StorePaths.resolve(app_config))


def _fail(e: Exception):
    safe_echo(error_message(f"Error: {e}"), err=True)
    sys.exit(1)


def _render_result(result: SwitchResult):
    for notice in result.notices:
        if notice.level == "success":
            safe_echo(success_message(notice.text))
        elif notice.level == "warning":
            safe_echo(warning_message(notice.text))
        else:
            safe_echo(info_message(notice.text))


@click.group(cls=AliasedGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="claude-switch")
@click.option('--verbose', '-v', is_flag=True, help='Show debug output')
@click.pass_context
def cli(ctx, verbose: bool):
    """claude-switch - switch Claude Code between Anthropic and Z.AI (GLM)

    Switching to GLM backs up your Anthropic configuration first;
    'anthropic' restores it later.

    \b
    Commands:
      anthropic (a)  Restore the Anthropic configuration
      glm (g)        Switch to GLM with an API key
      status (s)     Show the current configuration
      clear-token    Remove the saved GLM API key
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
def anthropic():
    """Switch to the Anthropic API (restore from backup)"""
    try:
        safe_echo(info_message("Switching to Anthropic API..."))
        result = SwitchWorkflow(_make_store()).switch_to_default()
        _render_result(result)

        if result.outcome == Outcome.ALREADY_ACTIVE:
            safe_echo("  Use 'claude-switch status' to check current settings")
        elif result.outcome == Outcome.FALLBACK_EMPTY_CONFIG:
            safe_echo("  You may need to log in to Claude Code again")
    except ClaudeSwitchError as e:
        _fail(e)


@cli.command()
@click.option('--no-prompt', is_flag=True, help='Fail instead of asking for a token')
def glm(no_prompt: bool):
    """Switch to the GLM API (use an API key)"""
    try:
        app_config = _load_app_config()
        store = _make_store(app_config)
        supplier = TokenSupplier(store, app_config.token_env_vars, interactive=not no_prompt)

        safe_echo(info_message("Switching to GLM API..."))
        result = SwitchWorkflow(store).switch_to_alternate(supplier)
        _render_result(result)

        if result.outcome == Outcome.ALREADY_ACTIVE:
            safe_echo("  Use 'claude-switch status' to check current settings")
        else:
            safe_echo("\n  To switch back to Anthropic: claude-switch anthropic")
    except ClaudeSwitchError as e:
        _fail(e)


def _render_status(report: StatusReport):
    click.echo("Current Configuration Status:")

    if report.is_empty:
        safe_echo(warning_message("No configuration found (empty or missing)"))
    else:
        click.echo(f"  Provider: {report.provider.display_name}")
        for label, value in report.details:
            click.echo(f"  {label}: {value}")
        if report.other_key_count > 0:
            click.echo(f"  Other env vars: {report.other_key_count}")

    backup = report.backup
    if backup.available:
        click.echo("  Backup: Available (Anthropic)")
        if backup.created_at is not None:
            click.echo(f"    Created: {format_timestamp(backup.created_at)}")
        if backup.token_kind == TokenKind.ANTHROPIC_WEB_TOKEN:
            click.echo("    Token: Web login token")
        elif backup.token_kind == TokenKind.ZAI_API_KEY:
            safe_echo(warning_message("Backup token: API key (unexpected)"))
    elif backup.unknown_format:
        safe_echo(warning_message("Backup: Available (unknown format)"))
    else:
        click.echo("  Backup: Not found")

    click.echo(f"  Saved Token: {'Available' if report.saved_token else 'Not saved'}")


@cli.command()
def status():
    """Show the current configuration"""
    try:
        report = SwitchWorkflow(_make_store()).show_status()
        _render_status(report)
    except ClaudeSwitchError as e:
        _fail(e)


@cli.command(name="clear-token")
def clear_token():
    """Remove the saved GLM API token"""
    try:
        result = SwitchWorkflow(_make_store()).clear_token()
        _render_result(result)
    except ClaudeSwitchError as e:
        _fail(e)


@cli.command()
def info():
    """Show the files claude-switch reads and writes"""
    try:
        manager = AppConfigManager()
        paths = StorePaths.resolve(manager.load())

        click.echo("claude-switch files:")
        click.echo(f"  Preferences: {manager.config_path}")
        click.echo(f"  Config directory: {paths.config_dir}")
        for label, path in (
            ("Settings", paths.settings_file),
            ("Backup", paths.backup_file),
            ("Backup metadata", paths.metadata_file),
            ("Saved token", paths.token_file),
        ):
            click.echo(f"  {label}: {path}")
            click.echo(f"    Exists: {'Yes' if path.exists() else 'No'}")

        if paths.token_file.exists():
            click.echo(f"    Permissions: {get_file_permissions(paths.token_file)}")
    except ClaudeSwitchError as e:
        _fail(e)


@cli.command(name="config")
@click.option('--claude-dir', type=click.Path(file_okay=False), help='Claude Code config directory')
@click.option('--token-env', 'token_env', multiple=True, help='Environment variable holding the GLM token (repeatable)')
@click.option('--reset', is_flag=True, help='Restore default preferences')
def config_cmd(claude_dir: Optional[str], token_env: Tuple[str, ...], reset: bool):
    """Show or change claude-switch preferences"""
    try:
        manager = AppConfigManager()
        app_config = AppConfig() if reset else manager.load()

        if claude_dir:
            app_config.claude_dir = claude_dir
        if token_env:
            app_config.token_env_vars = list(token_env)

        if reset or claude_dir or token_env:
            manager.save(app_config)
            safe_echo(success_message(f"Preferences saved to {manager.config_path}"))

        click.echo(f"  Claude dir: {app_config.claude_dir or '~/.claude (default)'}")
        click.echo(f"  Token env vars: {', '.join(app_config.token_env_vars) or 'None'}")
    except (ClaudeSwitchError, OSError) as e:
        _fail(e)


@cli.command()
@click.option('--force', is_flag=True, help='Reinstall even if already installed')
def install(force: bool):
    """Install claude-anthropic / claude-glm / claude-status shell aliases"""
    if platform.system() == 'Windows':
        safe_echo(error_message("Shell aliases are not supported on Windows"))
        click.echo("  Use 'claude-switch anthropic' or 'claude-switch glm' directly")
        sys.exit(1)

    integration = ShellIntegration()
    config_path = integration.get_shell_config_path()

    if integration.is_installed() and not force:
        safe_echo(success_message(f"Aliases already installed in {config_path}"))
        click.echo("  Use --force to reinstall")
        return

    if not integration.install():
        safe_echo(error_message("Failed to install aliases"), err=True)
        sys.exit(1)

    safe_echo(success_message(f"Aliases added to {config_path}"))
    click.echo("\nAvailable after reload:")
    click.echo("  claude-anthropic  # Quick switch to Anthropic")
    click.echo("  claude-glm        # Quick switch to GLM")
    click.echo("  claude-status     # Quick status check")
    click.echo(f"\nReload your shell:\n  source {config_path}")


@cli.command()
def uninstall():
    """Remove the shell aliases"""
    integration = ShellIntegration()

    if not integration.is_installed():
        click.echo("claude-switch aliases are not installed")
        return

    if not integration.uninstall():
        safe_echo(error_message("Failed to remove aliases"), err=True)
        sys.exit(1)

    safe_echo(success_message("Aliases removed"))
    click.echo("Restart your terminal or reload your shell config")


def main():
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
