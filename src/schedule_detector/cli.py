"""CLI for schedule analysis with concurrent processing."""

import asyncio
import json
import sys
import time
from collections.abc import AsyncIterator
from pathlib import Path

import click

from schedule_detector import config
from schedule_detector.models import DetectorConfig, PipelineState, ProcessingError, ScheduleStore
from schedule_detector.pipeline import analyze_image_async, first_error
from schedule_detector.query import query_day_range
from schedule_detector.store import (
    add_record,
    clear_store,
    load_store,
    make_record,
    remove_record,
    save_store,
)
from schedule_detector.utils import time_options

Outcome = PipelineState | ProcessingError


async def process_single_image(
    img_path: Path,
    start_time: str,
    detector_config: DetectorConfig,
    semaphore: asyncio.Semaphore,
    verbose: bool,
) -> tuple[Path, Outcome | None, Exception | None]:
    """Process a single image with semaphore control."""
    async with semaphore:
        if verbose:
            click.echo(f"Processing: {img_path}")
        try:
            outcome = await analyze_image_async(img_path, start_time, detector_config)
            return (img_path, outcome, None)
        except Exception as e:
            return (img_path, None, e)


async def process_images_concurrent(
    images: tuple[Path, ...],
    start_time: str,
    detector_config: DetectorConfig,
    max_concurrency: int,
    verbose: bool,
) -> AsyncIterator[tuple[Path, Outcome | None, Exception | None]]:
    """Process images with a bounded in-flight queue and stream completed results."""
    semaphore = asyncio.Semaphore(max_concurrency)
    image_iter = iter(images)
    in_flight: set[asyncio.Task[tuple[Path, Outcome | None, Exception | None]]] = set()

    def _schedule_next() -> bool:
        try:
            img_path = next(image_iter)
        except StopIteration:
            return False
        task = asyncio.create_task(
            process_single_image(img_path, start_time, detector_config, semaphore, verbose)
        )
        in_flight.add(task)
        return True

    for _ in range(min(max_concurrency, len(images))):
        _schedule_next()

    while in_flight:
        done, _ = await asyncio.wait(in_flight, return_when=asyncio.FIRST_COMPLETED)
        for completed in done:
            in_flight.remove(completed)
            yield completed.result()
            _schedule_next()


def _failure_reason(outcome: Outcome | None, error: Exception | None) -> str | None:
    if error is not None:
        return str(error)
    if outcome is None:
        return "no result"
    if isinstance(outcome, ProcessingError):
        return f"[{outcome.stage.value}] {outcome.message}"
    err = first_error(outcome)
    if err is not None:
        return f"[{err.stage.value}] {err.message}"
    if outcome.nav is None or outcome.availability is None:
        return "pipeline produced no availability grid"
    return None


def _open_store(path: Path) -> ScheduleStore:
    loaded = load_store(path)
    if isinstance(loaded, ProcessingError):
        click.echo(f"Error: {loaded.message}", err=True)
        sys.exit(1)
    return loaded


def _write_store(store: ScheduleStore, path: Path) -> None:
    saved = save_store(store, path)
    if isinstance(saved, ProcessingError):
        click.echo(f"Error: {saved.message}", err=True)
        sys.exit(1)


@click.group()
def main() -> None:
    """Detect weekly availability from schedule screenshots."""


@main.command()
@click.argument("images", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--start-time",
    default=config.DEFAULT_START_TIME,
    show_default=True,
    help="Wall-clock time of the first slot",
)
@click.option("-o", "--output", type=click.Path(path_type=Path), help="Output JSON file (single image)")
@click.option("--output-dir", type=click.Path(path_type=Path), help="Output directory (batch mode)")
@click.option("--seed", type=int, default=None, help="Seed for cell sampling")
@click.option(
    "--spill-policy",
    type=click.Choice(["soft_free", "strict"]),
    default="soft_free",
    show_default=True,
    help="Whether gridline bleed may turn a busy cell free",
)
@click.option("--exhaustive", is_flag=True, help="Count every pixel instead of sampling")
@click.option("--store", type=click.Path(path_type=Path), help="Schedule store to add the result to")
@click.option("--person", help="Person name for the store record")
@click.option(
    "--max-concurrency",
    type=int,
    default=config.DEFAULT_MAX_CONCURRENCY,
    help="Max concurrent image processing",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
def analyze(
    images: tuple[Path, ...],
    start_time: str,
    output: Path | None,
    output_dir: Path | None,
    seed: int | None,
    spill_policy: str,
    exhaustive: bool,
    store: Path | None,
    person: str | None,
    max_concurrency: int,
    verbose: bool,
) -> None:
    """Analyse schedule images into availability grids."""
    if not images:
        click.echo("Error: No input images provided", err=True)
        sys.exit(1)

    batch = len(images) > 1 or output_dir is not None
    if batch and output:
        click.echo("Error: Use --output-dir for batch processing", err=True)
        sys.exit(1)
    if (store is None) != (person is None):
        click.echo("Error: --store and --person must be given together", err=True)
        sys.exit(1)
    if person is not None and len(images) > 1:
        click.echo("Error: --person takes a single image", err=True)
        sys.exit(1)
    if max_concurrency < 1:
        click.echo("Error: --max-concurrency must be >= 1", err=True)
        sys.exit(1)
    if output_dir:
        output_dir.mkdir(parents=True, exist_ok=True)

    detector_config = DetectorConfig(
        sample_seed=seed,
        spill_policy=spill_policy,
        exhaustive_sampling=exhaustive,
    )

    async def _run() -> tuple[int, int]:
        success_count = 0
        fail_count = 0

        async for img_path, outcome, error in process_images_concurrent(
            images, start_time, detector_config, max_concurrency, verbose
        ):
            reason = _failure_reason(outcome, error)
            if reason is not None:
                fail_count += 1
                click.echo(f"{img_path}: could not analyze this image: {reason}", err=True)
                continue

            state = outcome
            if batch:
                out_path = (output_dir or img_path.parent) / f"{img_path.stem}.json"
            else:
                out_path = output or Path(f"{img_path.stem}.json")

            result = {
                "source": img_path.name,
                "nav": state.nav.model_dump(mode="json"),
                "availability": state.availability.model_dump(mode="json"),
                "warnings": state.warnings,
            }
            out_path.write_text(json.dumps(result, indent=2))

            if verbose:
                click.echo(f"  Output: {out_path} ({state.availability.slots} slots)")
                for w in state.warnings:
                    click.echo(f"  {w}", err=True)

            if store is not None and person is not None:
                loaded = load_store(store)
                if isinstance(loaded, ProcessingError):
                    fail_count += 1
                    click.echo(f"Error: {loaded.message}", err=True)
                    continue
                record = make_record(person, state.nav, state.availability, file_name=img_path.name)
                saved = save_store(add_record(loaded, record), store)
                if isinstance(saved, ProcessingError):
                    fail_count += 1
                    click.echo(f"Error: {saved.message}", err=True)
                    continue
                if verbose:
                    click.echo(f"  Stored as {record.person!r} in {saved}")
            success_count += 1

        return success_count, fail_count

    success_count, fail_count = asyncio.run(_run())

    if batch:
        click.echo(
            f"Processed {success_count + fail_count} images: "
            f"{success_count} success, {fail_count} failed"
        )

    if fail_count > 0:
        sys.exit(1)


@main.command()
@click.argument("store", type=click.Path(path_type=Path))
@click.option("--day", required=True, type=click.Choice(list(config.WEEKDAYS)))
@click.option("--start", "start_time", required=True, help="Window start, e.g. '9:00 AM'")
@click.option("--end", "end_time", required=True, help="Window end, e.g. '11:30 AM'")
@click.option("--json", "as_json", is_flag=True, help="Print the raw query result")
def query(store: Path, day: str, start_time: str, end_time: str, as_json: bool) -> None:
    """List who is free on DAY between --start and --end."""
    loaded = _open_store(store)

    result = query_day_range(loaded.records, day, start_time, end_time)
    if isinstance(result, ProcessingError):
        click.echo(f"Error: {result.message}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    click.echo(f"{result.day} {result.start} -> {result.end}")
    if not result.available:
        click.echo("No one has free time in that window.")
    for person in result.available:
        ranges = ", ".join(f"{r.start} - {r.end}" for r in person.free_ranges)
        note = "" if person.covers_range else f" (last mapped time {person.last_mapped_time})"
        click.echo(f"  {person.person}: {ranges}{note}")
    for skipped in result.skipped:
        click.echo(f"  skipped {skipped.person}: {skipped.reason}")


@main.command()
@click.argument("store", type=click.Path(path_type=Path))
def people(store: Path) -> None:
    """List the schedules saved in STORE."""
    loaded = _open_store(store)
    if not loaded.records:
        click.echo("No saved schedules.")
        return
    for i, record in enumerate(loaded.records, 1):
        saved = time.strftime("%Y-%m-%d %H:%M", time.localtime(record.saved_at))
        source = f"{record.file_name}, " if record.file_name else ""
        click.echo(f"{i}. {record.person} ({source}{record.availability.slots} slots, saved {saved})")


@main.command()
@click.argument("store", type=click.Path(path_type=Path))
@click.option("--person", required=True, help="Name of the schedule to delete")
def remove(store: Path, person: str) -> None:
    """Delete one person's schedule from STORE."""
    loaded = _open_store(store)
    name = person.strip()
    if not any(r.person == name for r in loaded.records):
        click.echo(f"Error: no schedule saved for {name!r}", err=True)
        sys.exit(1)
    _write_store(remove_record(loaded, name), store)
    click.echo(f"Removed {name!r} from {store}")


@main.command()
@click.argument("store", type=click.Path(path_type=Path))
@click.confirmation_option(prompt="Delete every saved schedule?")
def clear(store: Path) -> None:
    """Delete every schedule from STORE."""
    loaded = _open_store(store)
    _write_store(clear_store(loaded), store)
    click.echo(f"Cleared {len(loaded.records)} schedules from {store}")


@main.command()
def times() -> None:
    """Print the selectable slot start times."""
    for label in time_options():
        click.echo(label)


if __name__ == "__main__":
    main()
