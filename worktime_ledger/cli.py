"""
Command Line Interface Module

Provides CLI commands for logging and reconciling worktime.
"""

import sys
from datetime import date

import click
import yaml

from .config import ConfigManager
from .dates import resolve_target_date
from .errors import WorktimeError
from .ledger import round_hours
from .logging_setup import setup_logging, get_logger
from .worktime_logger import WorktimeLogger


def _fail(ctx, error: Exception) -> None:
    logger = ctx.obj.get('logger') if ctx.obj else None
    if logger:
        logger.error(str(error))
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _report_backfill(worktime: WorktimeLogger, path, yesterday: bool) -> None:
    end_key = resolve_target_date(None, yesterday, date.today())
    missing = worktime.backfill_report(path, end_key)
    if missing is None:
        click.echo("No data yet to backfill.")
    elif missing:
        click.echo(f"Missing dates ({len(missing)}): {', '.join(missing)}")
    else:
        click.echo("No missing dates.")


def _date_options(func):
    func = click.option('--yesterday', is_flag=True, help='Use yesterday instead of today')(func)
    func = click.option('--date', 'date_arg', default=None, help='Target date (YYYY-MM-DD)')(func)
    return func


def _sync_options(func):
    func = click.option('--rebase', is_flag=True, help='Pull with rebase before pushing')(func)
    func = click.option('--push', is_flag=True, help='Push after committing')(func)
    func = click.option('--commit', is_flag=True, help='Commit the updated ledger with git')(func)
    func = click.option('--backfill', is_flag=True, help='Report dates missing from the ledger')(func)
    return func


@click.group()
@click.option('--config', '-c', default='config.yaml',
              help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True,
              help='Enable verbose logging')
@click.pass_context
def cli(ctx, config, verbose):
    """Worktime Ledger - daily working hours from ActivityWatch."""
    ctx.ensure_object(dict)

    try:
        config_manager = ConfigManager(config)
    except WorktimeError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    ctx.obj['config'] = config_manager

    log_level = 'DEBUG' if verbose else config_manager.get('logging.level', 'INFO')
    log_file = config_manager.get_log_file_path()
    setup_logging(
        str(log_file) if log_file else None,
        log_level,
        config_manager.get('logging.max_log_size_mb', 10),
        config_manager.get('logging.backup_count', 3),
    )
    ctx.obj['logger'] = get_logger('cli')
    ctx.obj.setdefault('worktime', WorktimeLogger(config_manager))


@cli.command()
@click.argument('hours')
@_date_options
@click.option('--device', default=None, help='Write to this device ledger instead of the canonical one')
@click.option('--out', default=None, help='Ledger path relative to the project root')
@_sync_options
@click.pass_context
def log(ctx, hours, date_arg, yesterday, device, out, backfill, commit, push, rebase):
    """Log HOURS worked on a date."""
    worktime = ctx.obj['worktime']

    try:
        target_date = resolve_target_date(date_arg, yesterday, date.today())
        path = worktime.resolve_ledger_path(device=device, out=out)
        result = worktime.log_hours(hours, target_date, path)

        click.echo(f"Logged {result.hours}h for {target_date}.")
        click.echo(f"Updated: {worktime.layout.relative(path)}")

        if backfill:
            _report_backfill(worktime, path, yesterday)
        worktime.sync(result, commit=commit, push=push, rebase=rebase)

    except WorktimeError as e:
        _fail(ctx, e)


@cli.command()
@click.option('--device', default=None, help='Device name (defaults to WORKTIME_DEVICE or the hostname)')
@_date_options
@click.option('--server', default=None, help='ActivityWatch server URL')
@click.option('--dry-run', is_flag=True, help='Show the detected hours without writing')
@_sync_options
@click.pass_context
def auto(ctx, device, date_arg, yesterday, server, dry_run, backfill, commit, push, rebase):
    """Log hours detected by ActivityWatch into this device's ledger."""
    worktime = ctx.obj['worktime']

    try:
        target_date = resolve_target_date(date_arg, yesterday, date.today())
        device_id = worktime.device_id(device)
        path = worktime.layout.device_path(device_id)

        result = worktime.collect(target_date, server)
        rounded = round_hours(result.hours)

        click.echo(f"ActivityWatch source: {result.source_label}")
        click.echo(f"Detected {result.hours:.2f}h on {target_date}; logging {rounded}h.")
        click.echo(f"Device: {device_id} -> {worktime.layout.relative(path)}")

        if dry_run:
            click.echo("Dry run enabled: no data file was modified.")
            return

        logged = worktime.log_collected(result, target_date, device_id)
        click.echo(f"Logged {logged.hours}h for {target_date}.")

        if backfill:
            _report_backfill(worktime, path, yesterday)
        worktime.sync(logged, commit=commit, push=push, rebase=rebase)

    except WorktimeError as e:
        click.echo("Could not log ActivityWatch data.", err=True)
        _fail(ctx, e)


@cli.command()
@click.pass_context
def merge(ctx):
    """Merge all device ledgers into the canonical ledger."""
    worktime = ctx.obj['worktime']

    try:
        report = worktime.merge_devices()
    except WorktimeError as e:
        _fail(ctx, e)
        return

    if report is None:
        click.echo("No device files found. Nothing to merge.")
        return

    layout = worktime.layout
    click.echo(f"Merged {len(report.device_files)} device file(s) into {layout.relative(report.canonical_path)}")
    click.echo(f"Device sources: {', '.join(p.name for p in report.device_files)}")
    if report.overridden_dates:
        click.echo(f"Replaced canonical values for: {', '.join(report.overridden_dates)}")


@cli.command()
@click.option('--start', default=None, help='First date (defaults to the earliest logged date)')
@click.option('--end', default=None, help='Last date (defaults to today)')
@click.option('--device', default=None, help='Check a device ledger instead of the canonical one')
@click.pass_context
def gaps(ctx, start, end, device):
    """List dates with no logged hours."""
    worktime = ctx.obj['worktime']

    try:
        end_key = resolve_target_date(end, False, date.today())
        path = worktime.resolve_ledger_path(device=device)
        missing = worktime.gaps(start, end_key, path)
    except WorktimeError as e:
        _fail(ctx, e)
        return

    if missing is None:
        click.echo("No data yet to backfill.")
    elif missing:
        click.echo(f"Missing dates ({len(missing)}):")
        for date_key in missing:
            click.echo(f"  {date_key}")
    else:
        click.echo("No missing dates.")


@cli.command('test-connection')
@_date_options
@click.option('--server', default=None, help='ActivityWatch server URL')
@click.pass_context
def test_connection(ctx, date_arg, yesterday, server):
    """Check the ActivityWatch connection and estimate hours without writing."""
    worktime = ctx.obj['worktime']

    try:
        target_date = resolve_target_date(date_arg, yesterday, date.today())
        probe = worktime.probe(target_date, server)
    except WorktimeError as e:
        click.echo("Could not read ActivityWatch data.", err=True)
        _fail(ctx, e)
        return

    click.echo(f"Connected to ActivityWatch: {probe.server_url}")
    click.echo(f"Host: {worktime.hostname}")
    click.echo(f"Version: {probe.version}")
    click.echo(f"Buckets: {probe.bucket_count}")
    click.echo(f"Source: {probe.collection.source_label}")
    click.echo(f"Events on {target_date}: {probe.collection.event_count}")
    click.echo(f"Estimated active hours: {probe.collection.hours:.2f}h")


@cli.command()
@click.option('--key', required=True, help='Configuration key (e.g., device.name)')
@click.option('--value', required=True, help='Configuration value')
@click.pass_context
def config_set(ctx, key, value):
    """Set a configuration value."""
    config = ctx.obj['config']
    logger = ctx.obj['logger']

    if value.lower() in ('true', 'false'):
        value = value.lower() == 'true'
    elif value.lower() in ('null', 'none'):
        value = None
    elif value.isdigit():
        value = int(value)
    elif value.replace('.', '', 1).isdigit():
        value = float(value)

    try:
        config.set(key, value)
        config.save_config()
    except OSError as e:
        _fail(ctx, e)
        return

    click.echo(f"Configuration updated: {key} = {value}")
    logger.info(f"Configuration updated: {key} = {value}")


@cli.command()
@click.option('--key', help='Specific configuration key to show')
@click.pass_context
def config_get(ctx, key):
    """Get configuration value(s)."""
    config = ctx.obj['config']

    if key:
        value = config.get(key)
        if value is not None:
            click.echo(f"{key}: {value}")
        else:
            click.echo(f"Configuration key '{key}' not found")
    else:
        click.echo(yaml.safe_dump(config.config, default_flow_style=False, sort_keys=False))


if __name__ == '__main__':
    cli()
