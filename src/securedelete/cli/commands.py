from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from securedelete.hosts.memory import InMemoryHost, load_selection_file
from securedelete.managers.delete_manager import DeleteOutcome, SecureDeleteManager
from securedelete.utils.logging_config import get_logger

logger = get_logger(__name__)

_OUTCOME_COLORS = {
    DeleteOutcome.APPROVED: 'green',
    DeleteOutcome.CANCELLED: 'yellow',
    DeleteOutcome.BLOCKED: 'red',
}


def _load_host(path: str) -> InMemoryHost:
    try:
        return load_selection_file(Path(path))
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _make_manager() -> SecureDeleteManager:
    from securedelete.config import load_policy

    return SecureDeleteManager(policy=load_policy())


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """Secure Delete CLI: review and authorize deletions."""
    from securedelete.utils.logging_config import setup_cli_logging

    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet

    setup_cli_logging(verbose=verbose, quiet=quiet)


@cli.command('delete')
@click.argument('selection_files', nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option('--gui', is_flag=True, help='Review in a PyQt6 dialog instead of the terminal')
def delete_cmd(selection_files: tuple[str, ...], gui: bool):
    """Run one delete attempt per SELECTION_FILE.

    Attempts share one session, so a code accepted for one file opens the
    grace window for the files after it.
    """
    manager = _make_manager()
    if gui:
        from securedelete.gui.review_dialog import QtReviewer

        reviewer = QtReviewer()
    else:
        from securedelete.review.console import ConsoleReviewer

        reviewer = ConsoleReviewer(is_high_risk=manager.classifier.is_high_risk_category)

    for path in selection_files:
        host = _load_host(path)
        host.on_message = click.echo
        click.echo(f"\n{click.style(host.get_name(), fg='cyan', bold=True)}")
        result = manager.handle_delete(host, reviewer)

        color = _OUTCOME_COLORS[result.outcome]
        click.echo(f"Outcome: {click.style(result.outcome.value.upper(), fg=color, bold=True)}")
        if result.proceeded:
            click.echo(f"Deleting {len(host.restricted_to or [])} element(s):")
            for identity in host.restricted_to or []:
                click.echo(f"  - {identity}")

    remaining = manager.gate.grace_remaining(manager.clock())
    if remaining.total_seconds() > 0:
        click.echo(f"\nGrace window open for {int(remaining.total_seconds() // 60)} more minute(s).")


@cli.command('classify')
@click.argument('selection_file', type=click.Path(dir_okay=False))
def classify_cmd(selection_file: str):
    """Show whether deleting SELECTION_FILE would require a code."""
    manager = _make_manager()
    host = _load_host(selection_file)
    items, dropped = manager.resolve_selection(host, host.get_current_selection())
    risky = manager.classifier.high_risk_items(items)

    click.echo(f"Resolved {len(items)} element(s) ({dropped} could not be found)")
    click.echo(f"Threshold: {manager.policy.threshold_count}")
    if risky:
        click.echo('High-risk elements:')
        for item in risky:
            click.echo(f"  {click.style(item.display_label, fg='red')}")
    needed = manager.classifier.classify(items)
    click.echo(f"Code required: {'yes' if needed else 'no'}")


@cli.group('config')
def config_group():
    """Manage persistent configuration (XDG config)."""
    pass


@config_group.command('set')
@click.argument('key', type=str)
@click.argument('value', type=str)
@click.option('--yes', is_flag=True, help='Do not ask for confirmation')
def config_set(key: str, value: str, yes: bool):
    """Set a config key. Supported keys: required_code, high_risk_categories,
    threshold_count, grace_minutes, notify_dropped"""
    from securedelete.config import _config_file_path, get_allowed_keys, set_config_value, validate_config_value

    if key not in get_allowed_keys():
        click.echo(f'Unsupported config key: {key}')
        return

    try:
        validate_config_value(key, value)
    except ValueError as e:
        click.echo(f'Validation error: {e}')
        return

    shown = '****' if key == 'required_code' else value
    if not yes:
        click.echo(f'About to set {key} in {_config_file_path()} to {shown}')
        if not click.confirm('Proceed?'):
            click.echo('Aborted.')
            return

    if set_config_value(key, value):
        click.echo(f'Set {key} = {shown}')
    else:
        click.echo('Failed to set config (validation or IO error)')


@config_group.command('get')
@click.argument('key', type=str)
@click.option('--defaults', is_flag=True, help='Show environment/config/code defaults for the key')
def config_get(key: str, defaults: bool):
    from securedelete.config import get_effective_value, load_config

    secret = key == 'required_code'

    def _shown(value):
        if secret and value is not None:
            return '(set)'
        return value

    if defaults:
        eff = get_effective_value(key)
        if not eff:
            click.echo('')
            return
        click.echo(f"env: {_shown(eff.get('env'))}")
        click.echo(f"config: {_shown(eff.get('config'))}")
        click.echo(f"code_default: {_shown(eff.get('code_default'))}")
        click.echo(f"effective: {_shown(eff.get('effective'))}")
        return

    cfg = load_config() or {}
    if key in cfg:
        click.echo(_shown(cfg[key]))
    else:
        click.echo('')


@config_group.command('show')
def config_show():
    """Show the effective policy (the code itself is never printed)."""
    from securedelete.config import get_allowed_keys, get_effective_value

    for key in get_allowed_keys():
        eff = get_effective_value(key) or {}
        value = eff.get('effective')
        if key == 'required_code':
            value = '(set)'
        elif isinstance(value, list):
            value = ', '.join(value)
        click.echo(f"{key}: {value}")


def main(argv: Optional[list[str]] = None):
    cli(args=argv)
