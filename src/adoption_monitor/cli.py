"""CLI entry point for adoption-monitor."""

import sys
from pathlib import Path
import json

import click

from .config import LOG_LEVELS, get_config_file_path, load_settings
from .logs import configure_logging
from .state import get_default_state_dir, open_state_store
from .statistics import StatisticsAggregator


def resolve_state_dir(state_dir) -> Path:
    return Path(state_dir) if state_dir else get_default_state_dir()


def open_aggregator(state_path: Path) -> StatisticsAggregator:
    return StatisticsAggregator(open_state_store(state_path))


@click.group()
@click.version_option(package_name='adoption-monitor')
@click.option("--log-level", default="info", type=click.Choice(LOG_LEVELS), help="Log verbosity")
def main(log_level):
    """Adoption Monitor - track how much of your code is AI-generated."""
    configure_logging(log_level)


@main.command()
@click.option("--state-dir", default=None, help="Path to state directory")
def stats(state_dir):
    """Show the adoption statistics report."""
    aggregator = open_aggregator(resolve_state_dir(state_dir))
    click.echo(aggregator.get_formatted_report())


@main.command()
@click.option("--yes", is_flag=True, help="Reset without asking for confirmation")
@click.option("--state-dir", default=None, help="Path to state directory")
def reset(yes, state_dir):
    """Clear all recorded changes and restart the statistics period."""
    if not yes and not click.confirm("Are you sure you want to reset all statistics?"):
        click.echo("Reset cancelled.")
        return

    aggregator = open_aggregator(resolve_state_dir(state_dir))
    aggregator.reset()
    click.echo("Statistics have been reset")


@main.command()
@click.option("--output", default=None, help="Write JSON to file")
@click.option("--state-dir", default=None, help="Path to state directory")
def payload(output, state_dir):
    """Print the upload payload as JSON."""
    from .upload import write_payload_json

    aggregator = open_aggregator(resolve_state_dir(state_dir))
    data = aggregator.get_upload_payload()

    if output:
        output_path = Path(output)
        write_payload_json(data, output_path)
        click.echo(f"Wrote payload ({len(data['changes'])} AI changes, "
                   f"{len(data['manualEdits'])} manual edits) to {output_path}")
    else:
        click.echo(json.dumps(data, indent=2))


@main.command()
@click.argument("events_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--track-all", is_flag=True, help="Record manual edits too (overrides trackOnlyAIChanges)")
@click.option("--extension-active/--extension-inactive", default=True,
              help="Assistant state for events that don't carry one")
@click.option("--start", "force_start", is_flag=True, help="Start monitoring even when enableAutoStart is false")
@click.option("--state-dir", default=None, help="Path to state directory")
def replay(events_file, track_all, extension_active, force_start, state_dir):
    """Feed a JSONL edit-event log through the classifier and record the results.

    Each line is an "edit" or "save" event. The first edit seen for a file
    only establishes its document version and is not classified. Events
    are only recorded when enableAutoStart is true or --start is given.
    """
    from .classifier import ChangeClassifier
    from .models import AICodeChange, EditEvent, ManualEdit
    from .monitor import ChangeMonitor
    from .parser import get_events
    from .upload import UploadScheduler

    state_path = resolve_state_dir(state_dir)
    settings = load_settings(get_config_file_path(state_path))
    aggregator = open_aggregator(state_path)

    uploader = UploadScheduler(
        aggregator,
        endpoint=settings.upload_endpoint,
        interval=settings.upload_interval,
    )
    monitor = ChangeMonitor(
        ChangeClassifier(marker_tool=settings.ai_marker_tool),
        aggregator,
        track_only_ai=settings.track_only_ai_changes and not track_all,
        extension_active=extension_active,
        uploader=uploader,
    )
    if settings.enable_auto_start or force_start:
        monitor.start()
    else:
        click.echo("Monitoring not started (enableAutoStart is false); pass --start to record events.", err=True)

    ai_count = 0
    manual_count = 0
    skipped = 0
    saves = 0
    untimed = 0

    for event in get_events(Path(events_file)):
        if event.timestamp is None:
            untimed += 1
        if isinstance(event, EditEvent):
            record = monitor.handle_event(event)
            if isinstance(record, AICodeChange):
                ai_count += 1
            elif isinstance(record, ManualEdit):
                manual_count += 1
            else:
                skipped += 1
        else:
            if monitor.handle_save(event) is not None:
                saves += 1
        uploader.run_pending(event.timestamp)

    monitor.stop()

    if untimed:
        click.echo(f"Warning: {untimed} events had no timestamp; wall-clock time was used, "
                   "so rapid-edit classification may differ between runs.", err=True)

    statistics = aggregator.calculate_statistics()
    click.echo(f"Replayed {events_file}")
    click.echo(f"  AI changes recorded: {ai_count}")
    click.echo(f"  Manual edits recorded: {manual_count}")
    click.echo(f"  Edit events not recorded: {skipped}")
    click.echo(f"  Saves: {saves}")
    click.echo(f"  Adoption rate: {statistics.adoption_rate:.2f}%")


@main.command()
@click.option("--endpoint", default=None, help="Upload endpoint (overrides uploadEndpoint)")
@click.option("--state-dir", default=None, help="Path to state directory")
def upload(endpoint, state_dir):
    """Stage one upload of the current statistics.

    No data leaves the machine; the payload is handed to the logging
    transport. Use --log-level verbose to see it.
    """
    from .upload import UploadScheduler

    state_path = resolve_state_dir(state_dir)
    settings = load_settings(get_config_file_path(state_path))
    endpoint = endpoint or settings.upload_endpoint

    if not endpoint:
        click.echo("Error: No upload endpoint configured. Set uploadEndpoint or pass --endpoint.", err=True)
        sys.exit(1)

    aggregator = open_aggregator(state_path)
    # A manual upload ignores the configured interval
    scheduler = UploadScheduler(aggregator, endpoint=endpoint, interval=max(settings.upload_interval, 1))
    data = scheduler.tick()

    click.echo(f"Staged upload to {endpoint}: {len(data['changes'])} AI changes, "
               f"{len(data['manualEdits'])} manual edits")


if __name__ == "__main__":
    main()
