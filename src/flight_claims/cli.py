"""Command line interface."""

import json
import logging
from datetime import datetime
from pathlib import Path

import click
from pydantic import TypeAdapter

from .config import get_settings
from .core.errors import DisruptionInputError
from .core.models import Claim, DisruptionType
from .engine import ClaimEngine
from .store import InMemoryClaimStore
from .utils.log import setup_logging

logger = logging.getLogger(__name__)

_CLAIMS = TypeAdapter(list[Claim])


def _load_store(path: str | None) -> InMemoryClaimStore:
    if path is None:
        return InMemoryClaimStore()
    claims = _CLAIMS.validate_json(Path(path).read_text())
    logger.info("Loaded %d claims from %s", len(claims), path)
    return InMemoryClaimStore(claims)


def _write_store(store: InMemoryClaimStore, path: str) -> None:
    Path(path).write_bytes(_CLAIMS.dump_json(store.all(), indent=2))


def _parse_fact(value: str) -> tuple[str, object]:
    key, sep, raw = value.partition("=")
    if not sep:
        raise click.BadParameter(f"expected key=value, got {value!r}")
    try:
        return key.strip(), json.loads(raw)
    except json.JSONDecodeError:
        return key.strip(), raw


@click.group()
@click.option("--log-level", default=None, help="Override FLIGHT_CLAIMS_LOG_LEVEL")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Flight disruption claims engine."""
    settings = get_settings()
    setup_logging(log_level or settings.log_level)
    ctx.obj = settings


@cli.command()
@click.argument("flight_number")
@click.argument("flight_date", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.argument("origin")
@click.argument("destination")
@click.option(
    "--type",
    "disruption_type",
    type=click.Choice([t.value for t in DisruptionType]),
    default=DisruptionType.DELAY.value,
    show_default=True,
)
@click.option("--delay", "delay_minutes", type=int, default=0, help="Arrival delay in minutes")
@click.option("--cancelled", is_flag=True, help="The flight was cancelled")
@click.option("--reason", help="Reason given by the airline")
@click.option("--carrier", help="Operating carrier when not the flight number prefix")
@click.option("--distance-km", type=click.FloatRange(min=0), help="Route distance when an airport is not in the table")
@click.option("--departure-country", help="ISO country of the departure airport when not in the table")
@click.option("--arrival-country", help="ISO country of the destination airport when not in the table")
@click.option("--fact", "facts", multiple=True, help="Disruption fact as key=value (repeatable)")
@click.option("--lookup", "use_lookup", is_flag=True, help="Query flight data providers first")
@click.option("--json", "as_json", is_flag=True, help="Print the decision as JSON")
@click.pass_obj
def quote(
    settings,
    flight_number: str,
    flight_date: datetime,
    origin: str,
    destination: str,
    disruption_type: str,
    delay_minutes: int,
    cancelled: bool,
    reason: str | None,
    carrier: str | None,
    distance_km: float | None,
    departure_country: str | None,
    arrival_country: str | None,
    facts: tuple[str, ...],
    use_lookup: bool,
    as_json: bool,
) -> None:
    """Quote compensation for a disrupted flight."""
    disruption = dict(_parse_fact(f) for f in facts)
    if reason and disruption_type in (DisruptionType.DELAY.value, DisruptionType.CANCELLATION.value):
        disruption.setdefault("reason", reason)

    engine = ClaimEngine(settings=settings)
    try:
        decision = engine.quote(
            flight_number,
            flight_date.date(),
            origin,
            destination,
            disruption_type,
            disruption=disruption,
            carrier=carrier,
            use_lookup=use_lookup,
            delay_minutes=delay_minutes,
            cancelled=cancelled,
            reason=reason,
            distance_km=distance_km,
            departure_country=departure_country,
            arrival_country=arrival_country,
        )
    except DisruptionInputError as exc:
        raise click.ClickException(f"{exc} (missing: {', '.join(exc.missing_fields) or 'none'})") from exc
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        engine.close()

    if as_json:
        click.echo(decision.model_dump_json(indent=2))
        return
    verdict = "ELIGIBLE" if decision.eligible else "NOT ELIGIBLE"
    regulation = decision.regulation.value if decision.regulation else "none"
    click.echo(f"{verdict} under {regulation}: {decision.amount} {decision.currency}")
    click.echo(decision.reason)
    if decision.low_confidence:
        click.echo(f"Low confidence ({decision.confidence:.2f}): verify flight data before filing")
    for right in decision.additional_rights:
        click.echo(f"  - {right}")


@cli.command()
@click.option("--claims", "claims_path", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--write", is_flag=True, help="Write updated claims back to the file")
@click.pass_obj
def sweep(settings, claims_path: str, write: bool) -> None:
    """Run the refund and follow-up sweeps once."""
    store = _load_store(claims_path)
    engine = ClaimEngine(settings=settings, store=store)
    refunds = engine.run_refund_sweep()
    follow_ups = engine.run_follow_up_sweep()
    click.echo(
        f"Refund sweep: {refunds.evaluated} evaluated, {refunds.refunded_count} refunded, "
        f"{len(refunds.errors)} errors"
    )
    for claim_id, decision in refunds.refunded.items():
        click.echo(f"  {claim_id}: {decision.reason.value} {decision.amount} {decision.currency}")
    click.echo(f"Follow-ups recorded: {len(follow_ups)}")
    if write:
        _write_store(store, claims_path)


@cli.command()
@click.option("--claims", "claims_path", required=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True)
@click.pass_obj
def report(settings, claims_path: str, as_json: bool) -> None:
    """Print the claims pipeline report."""
    engine = ClaimEngine(settings=settings, store=_load_store(claims_path))
    formatter = engine.pipeline_report()
    click.echo(formatter.to_json() if as_json else formatter.to_text())


@cli.command()
@click.argument("query", required=False)
@click.pass_obj
def airlines(settings, query: str | None) -> None:
    """List supported airlines, optionally filtered."""
    directory = ClaimEngine(settings=settings).directory
    configs = directory.search(query) if query else sorted(directory, key=lambda c: c.name)
    for config in configs:
        click.echo(
            f"{config.code:<4} {config.name:<28} {config.submission_method.value:<9} "
            f"{config.submission_address or '-'}"
        )


@cli.command("serve-scheduler")
@click.option("--claims", "claims_path", required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_obj
def serve_scheduler(settings, claims_path: str) -> None:
    """Run the sweeps on their intervals until interrupted."""
    from .scheduler import build_scheduler

    store = _load_store(claims_path)
    engine = ClaimEngine(settings=settings, store=store)
    scheduler = build_scheduler(engine, blocking=True)
    click.echo(
        f"Sweeping every {settings.sweep_interval_minutes}m "
        f"(follow-ups every {settings.follow_up_interval_minutes}m); Ctrl+C to stop"
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped")
    finally:
        _write_store(store, claims_path)


if __name__ == "__main__":
    cli()
