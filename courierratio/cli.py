# file: courierratio/cli.py
"""
courierratio CLI.

Commands:
  - normalize: print the canonical form of a Bangladeshi mobile number
  - check: courier history + risk tier for a number
  - export: re-export a saved JSON report as JSON/CSV
  - plan: remaining API calls
  - ping: upstream connection probe
  - serve: run the HTTP API (uvicorn)
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable

import click

from courierratio import __version__
from courierratio.config import CourierRatioSettings, load_settings
from courierratio.core.enrich import enrich_phone
from courierratio.core.phone import INVALID_PHONE_MESSAGE, BdPhoneNumber, normalize_bd_phone
from courierratio.gateway.client import GatewayOutcome, MissingApiKeyError, UpstreamGateway
from courierratio.io.report import build_report, export_csv, export_json, human_text
from courierratio.logging_config import configure_logging
from courierratio.net.http import build_async_client
from courierratio.risk.score import assess

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config path.",
)


def _setup(config_path: Path | None) -> CourierRatioSettings:
    settings = load_settings(yaml_path=config_path)
    configure_logging(level=settings.log_level, json_logging=settings.json_logging)
    return settings


UpstreamCall = Callable[[UpstreamGateway], Awaitable[GatewayOutcome]]


async def _call_upstream(settings: CourierRatioSettings, call: UpstreamCall) -> GatewayOutcome:
    async with build_async_client(settings.http_config()) as client:
        gateway = UpstreamGateway(client=client, api_key=settings.api_key, base_url=settings.base_url)
        return await call(gateway)


def _run(settings: CourierRatioSettings, call: UpstreamCall) -> GatewayOutcome:
    try:
        outcome = asyncio.run(_call_upstream(settings, call))
    except MissingApiKeyError as exc:
        raise click.ClickException(f"{exc}. Put it in your environment or .env.") from exc
    if not outcome.ok:
        raise click.ClickException(f"{outcome.message or 'Request failed'} (HTTP {outcome.status_code})")
    return outcome


def lookup(raw: str, settings: CourierRatioSettings) -> dict[str, Any]:
    """Normalize, check upstream and assess; returns a JSON-serializable report."""

    phone: BdPhoneNumber | None = normalize_bd_phone(raw)
    if phone is None:
        raise click.ClickException(INVALID_PHONE_MESSAGE)

    outcome = _run(settings, lambda gateway: gateway.courier_check(phone))
    return build_report(
        raw=raw,
        phone=phone,
        enrichment=enrich_phone(phone),
        assessment=assess(outcome.data),
        upstream_reports=outcome.body.get("reports"),
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__)
def main() -> None:
    """Courier delivery history and fraud-risk checks for BD mobile numbers."""


@main.command("normalize")
@click.argument("raw", type=str)
def normalize_cmd(raw: str) -> None:
    """Print the canonical 11-digit form of RAW."""

    phone = normalize_bd_phone(raw)
    if phone is None:
        raise click.ClickException(INVALID_PHONE_MESSAGE)
    click.echo(phone)


@main.command("check")
@click.argument("number", type=str)
@click.option("--json", "as_json", is_flag=True, help="Print the JSON report to stdout (or --output).")
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write primary output to a file.",
)
@click.option(
    "--report",
    "report_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the full JSON report to a file.",
)
@_config_option
def check_cmd(
    number: str,
    as_json: bool,
    output_path: Path | None,
    report_path: Path | None,
    config_path: Path | None,
) -> None:
    """Check courier delivery history for NUMBER."""

    settings = _setup(config_path)
    report = lookup(number, settings)

    if report_path is not None:
        export_json(report, report_path)

    if as_json:
        payload = json.dumps(report, indent=2, sort_keys=True, ensure_ascii=False)
        if output_path is not None:
            output_path.write_text(payload, encoding="utf-8")
        else:
            click.echo(payload)
    else:
        text = human_text(report)
        if output_path is not None:
            output_path.write_text(text, encoding="utf-8")
        click.echo(text, nl=False)


@main.command("export")
@click.argument("input_report", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["json", "csv"], case_sensitive=False),
    default="csv",
    show_default=True,
)
@click.option("--output", "output_path", type=click.Path(path_type=Path), default=None)
def export_cmd(input_report: Path, fmt: str, output_path: Path | None) -> None:
    """Re-export a saved JSON report."""

    report = json.loads(input_report.read_text(encoding="utf-8"))
    if not isinstance(report, dict):
        raise click.ClickException("Input report must be a JSON object.")

    fmt = fmt.lower()
    if output_path is None:
        output_path = input_report.with_suffix(f".{fmt}")

    if fmt == "json":
        export_json(report, output_path)
    else:
        export_csv(report, output_path)
    click.echo(str(output_path))


@main.command("plan")
@_config_option
def plan_cmd(config_path: Path | None) -> None:
    """Show remaining upstream API calls."""

    settings = _setup(config_path)
    outcome = _run(settings, lambda gateway: gateway.get_my_plan())
    plan = outcome.data
    if plan is None:
        raise click.ClickException("Plan details are not available.")
    click.echo(f"Remaining calls: {plan.remaining_calls}")
    click.echo(f"  Paid: {plan.remaining_paid_calls or 0}")
    click.echo(f"  Free: {plan.remaining_free_calls or 0}")
    click.echo(f"Subscription: {'yes' if plan.has_subscription else 'no'}")


@main.command("ping")
@_config_option
def ping_cmd(config_path: Path | None) -> None:
    """Probe the upstream API connection."""

    settings = _setup(config_path)
    outcome = _run(settings, lambda gateway: gateway.check_connection())
    status = outcome.body.get("status")
    click.echo("connected" if status == "success" else f"upstream status: {status}")


@main.command("serve")
@click.option("--host", default=None, help="Bind address (default from config).")
@click.option("--port", type=int, default=None, help="Port (default from config).")
@_config_option
def serve_cmd(host: str | None, port: int | None, config_path: Path | None) -> None:
    """Run the HTTP API."""

    settings = _setup(config_path)

    import uvicorn

    from courierratio.api.app import build_app

    uvicorn.run(
        build_app(settings),
        host=host or settings.server_host,
        port=port or settings.server_port,
        log_config=None,
    )
