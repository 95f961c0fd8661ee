# file: tests/test_cli.py
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

import pytest
from click.testing import CliRunner

from courierratio import cli
from courierratio.gateway.client import GatewayOutcome, decode_courier_check, decode_plan


@pytest.fixture(autouse=True)
def _isolated(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("COURIERRATIO_CONFIG", raising=False)
    monkeypatch.setenv("BDCOURIER_API_KEY", "test-key")

    # Commands reconfigure root logging onto the runner's stdout.
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class _RecordingGateway:
    def __init__(self, outcome: GatewayOutcome) -> None:
        self.outcome = outcome
        self.calls: list[tuple[Any, ...]] = []

    async def courier_check(self, phone: str) -> GatewayOutcome:
        self.calls.append(("courier_check", phone))
        return self.outcome

    async def get_my_plan(self) -> GatewayOutcome:
        self.calls.append(("get_my_plan",))
        return self.outcome

    async def check_connection(self) -> GatewayOutcome:
        self.calls.append(("check_connection",))
        return self.outcome


def _fake_upstream(monkeypatch: pytest.MonkeyPatch, outcome: GatewayOutcome) -> list[tuple[Any, ...]]:
    gateway = _RecordingGateway(outcome)

    async def fake(settings: Any, call: Any) -> GatewayOutcome:
        return await call(gateway)

    monkeypatch.setattr(cli, "_call_upstream", fake)
    return gateway.calls


def test_normalize_command() -> None:
    runner = CliRunner()
    ok = runner.invoke(cli.main, ["normalize", "+880 1730-285500"])
    assert ok.exit_code == 0
    assert ok.output.strip() == "01730285500"

    bad = runner.invoke(cli.main, ["normalize", "abc"])
    assert bad.exit_code == 1
    assert "Enter a valid BD number" in bad.output


def test_check_prints_assessment(
    monkeypatch: pytest.MonkeyPatch, courier_check_body: dict[str, Any]
) -> None:
    calls = _fake_upstream(
        monkeypatch,
        GatewayOutcome(
            kind="success",
            status_code=200,
            body=courier_check_body,
            data=decode_courier_check(courier_check_body),
        ),
    )

    result = CliRunner().invoke(cli.main, ["check", "1730285500"])

    assert result.exit_code == 0, result.output
    assert "Trusted" in result.output
    assert calls == [("courier_check", "01730285500")]


def test_check_json_report_and_export(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, courier_check_body: dict[str, Any]
) -> None:
    _fake_upstream(
        monkeypatch,
        GatewayOutcome(
            kind="success",
            status_code=200,
            body=courier_check_body,
            data=decode_courier_check(courier_check_body),
        ),
    )
    runner = CliRunner()
    report_path = tmp_path / "report.json"

    result = runner.invoke(cli.main, ["check", "01730285500", "--json", "--report", str(report_path)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["assessment"]["risk"] == "low"
    assert report_path.exists()

    exported = runner.invoke(cli.main, ["export", str(report_path), "--format", "csv"])
    assert exported.exit_code == 0, exported.output
    assert (tmp_path / "report.csv").exists()


def test_check_rejects_invalid_number_without_upstream_call(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _fake_upstream(
        monkeypatch, GatewayOutcome(kind="success", status_code=200, body={})
    )
    result = CliRunner().invoke(cli.main, ["check", "0123"])
    assert result.exit_code == 1
    assert calls == []


def test_check_reports_upstream_error(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_upstream(
        monkeypatch,
        GatewayOutcome(kind="error", status_code=401, body={"status": "error", "error": "Invalid API key"}),
    )
    result = CliRunner().invoke(cli.main, ["check", "01730285500"])
    assert result.exit_code == 1
    assert "Invalid API key (HTTP 401)" in result.output


def test_check_without_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("BDCOURIER_API_KEY")
    result = CliRunner().invoke(cli.main, ["check", "01730285500"])
    assert result.exit_code == 1
    assert "BDCOURIER_API_KEY is not set" in result.output


def test_plan_command(monkeypatch: pytest.MonkeyPatch) -> None:
    data = {"remaining_paid_calls": 7, "remaining_free_calls": 3, "has_subscription": True}
    _fake_upstream(
        monkeypatch,
        GatewayOutcome(
            kind="success",
            status_code=200,
            body={"status": "success", "data": data},
            data=decode_plan(data),
        ),
    )
    result = CliRunner().invoke(cli.main, ["plan"])
    assert result.exit_code == 0, result.output
    assert "Remaining calls: 10" in result.output
    assert "Subscription: yes" in result.output


def test_ping_command(monkeypatch: pytest.MonkeyPatch) -> None:
    _fake_upstream(
        monkeypatch, GatewayOutcome(kind="success", status_code=200, body={"status": "success"})
    )
    result = CliRunner().invoke(cli.main, ["ping"])
    assert result.exit_code == 0
    assert result.output.strip() == "connected"


def test_plan_and_ping_call_their_own_operations(monkeypatch: pytest.MonkeyPatch) -> None:
    data = {"remaining_paid_calls": 1}
    calls = _fake_upstream(
        monkeypatch,
        GatewayOutcome(
            kind="success",
            status_code=200,
            body={"status": "success", "data": data},
            data=decode_plan(data),
        ),
    )
    runner = CliRunner()
    assert runner.invoke(cli.main, ["plan"]).exit_code == 0
    assert runner.invoke(cli.main, ["ping"]).exit_code == 0
    assert calls == [("get_my_plan",), ("check_connection",)]
