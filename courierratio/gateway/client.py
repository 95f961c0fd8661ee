# file: courierratio/gateway/client.py
"""
Upstream gateway for the bdcourier API.

Every call ends in exactly one `GatewayOutcome`:
- success: the upstream body is passed through (status 200),
- error: a uniform `{"status": "error", <field>: message}` envelope,
- unavailable: the network failed; the caller only sees a generic message.

Failures never report a status below 400. Nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Literal

import httpx
from pydantic import ValidationError

from courierratio.core.phone import BdPhoneNumber
from courierratio.gateway.models import CourierCheckData, CourierCheckPayload, PlanStatus

logger = logging.getLogger(__name__)

BASE_URL = "https://api.bdcourier.com"
CHECK_CONNECTION_PATH = "/check-connection"
MY_PLAN_PATH = "/my-plan"
COURIER_CHECK_PATH = "/courier-check"

UNAVAILABLE_MESSAGE = "Service temporarily unavailable"
INVALID_API_KEY_MESSAGE = "Invalid API key"
REQUEST_FAILED_MESSAGE = "Request failed"
CONNECTION_FAILED_MESSAGE = "Connection failed"
UNKNOWN_ERROR_MESSAGE = "Unknown error"
DECODE_FAILURE_MESSAGE = "Invalid response from upstream"

OutcomeKind = Literal["success", "error", "unavailable"]
ErrorField = Literal["error", "message"]


class MissingApiKeyError(RuntimeError):
    """Raised when the upstream bearer credential is not configured."""


class UpstreamDecodeError(ValueError):
    """Raised when an upstream success body does not match the expected schema."""


@dataclass(frozen=True, slots=True)
class GatewayOutcome:
    kind: OutcomeKind
    status_code: int
    body: dict[str, Any]
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.kind == "success"

    @property
    def message(self) -> str | None:
        if self.ok:
            return None
        value = self.body.get("error") or self.body.get("message")
        return str(value) if value else None


def failure_status(status_code: int) -> int:
    """Status to report for a failed call: never below 400."""

    return status_code if status_code >= 400 else 502


def error_outcome(
    message: str,
    status_code: int,
    *,
    field: ErrorField = "error",
    kind: OutcomeKind = "error",
) -> GatewayOutcome:
    return GatewayOutcome(
        kind=kind,
        status_code=failure_status(status_code),
        body={"status": "error", field: message},
    )


def _read_json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return None


def _body_error_text(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    err = body.get("error")
    if isinstance(err, str) and err:
        return err
    return None


def decode_courier_check(body: Any) -> CourierCheckData:
    try:
        return CourierCheckPayload.model_validate(body).data
    except ValidationError as exc:
        raise UpstreamDecodeError(f"courier-check body: {exc.error_count()} invalid field(s)") from exc


def decode_plan(data: Any) -> PlanStatus:
    try:
        return PlanStatus.model_validate(data)
    except ValidationError as exc:
        raise UpstreamDecodeError(f"my-plan body: {exc.error_count()} invalid field(s)") from exc


class UpstreamGateway:
    """
    Authenticated access to the three upstream endpoints.

    The credential is injected once; construction fails fast without it so that
    no request is ever sent unauthenticated.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        api_key: str | None,
        base_url: str = BASE_URL,
    ) -> None:
        if not api_key:
            raise MissingApiKeyError("BDCOURIER_API_KEY is not set")
        self._client = client
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")

    def _headers(self, *, with_body: bool) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _exchange(
        self,
        method: str,
        path: str,
        *,
        field: ErrorField,
        fallback_message: str,
        payload: dict[str, Any] | None = None,
    ) -> httpx.Response | GatewayOutcome:
        """Send one request; return the OK response or the mapped failure."""

        logger.debug("upstream request %s %s", method, path)
        try:
            resp = await self._client.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers(with_body=payload is not None),
                json=payload,
            )
        except httpx.HTTPError as exc:
            logger.warning("upstream %s %s unreachable: %s", method, path, type(exc).__name__)
            return error_outcome(UNAVAILABLE_MESSAGE, 502, field=field, kind="unavailable")

        if resp.is_success:
            return resp

        body = _read_json(resp)
        message = _body_error_text(body)
        if message is None:
            message = INVALID_API_KEY_MESSAGE if resp.status_code == 401 else fallback_message
        logger.warning("upstream %s %s returned HTTP %s", method, path, resp.status_code)
        return error_outcome(message, resp.status_code, field=field)

    def _decode_failure(self, path: str, reason: str, *, field: ErrorField) -> GatewayOutcome:
        logger.warning("upstream %s sent an unexpected body: %s", path, reason)
        return error_outcome(DECODE_FAILURE_MESSAGE, 502, field=field)

    async def check_connection(self) -> GatewayOutcome:
        """Health probe against the upstream API."""

        result = await self._exchange(
            "GET", CHECK_CONNECTION_PATH, field="message", fallback_message=CONNECTION_FAILED_MESSAGE
        )
        if isinstance(result, GatewayOutcome):
            return result

        body = _read_json(result)
        if not isinstance(body, dict):
            return self._decode_failure(CHECK_CONNECTION_PATH, "not a JSON object", field="message")
        return GatewayOutcome(kind="success", status_code=200, body=body)

    async def get_my_plan(self) -> GatewayOutcome:
        """
        Quota query. On success `outcome.data` is a `PlanStatus` when the body
        carries `status: "success"` with a `data` object.
        """

        result = await self._exchange(
            "GET", MY_PLAN_PATH, field="error", fallback_message=REQUEST_FAILED_MESSAGE
        )
        if isinstance(result, GatewayOutcome):
            return result

        body = _read_json(result)
        if not isinstance(body, dict):
            return self._decode_failure(MY_PLAN_PATH, "not a JSON object", field="error")

        plan: PlanStatus | None = None
        if body.get("status") == "success" and body.get("data") is not None:
            try:
                plan = decode_plan(body["data"])
            except UpstreamDecodeError as exc:
                return self._decode_failure(MY_PLAN_PATH, str(exc), field="error")
        return GatewayOutcome(kind="success", status_code=200, body=body, data=plan)

    async def courier_check(self, phone: BdPhoneNumber) -> GatewayOutcome:
        """
        Courier history for a canonical number.

        On success `outcome.data` is the validated `CourierCheckData` and
        `outcome.body` is the untouched upstream body.
        """

        result = await self._exchange(
            "POST",
            COURIER_CHECK_PATH,
            field="error",
            fallback_message=REQUEST_FAILED_MESSAGE,
            payload={"phone": phone.strip()},
        )
        if isinstance(result, GatewayOutcome):
            return result

        body = _read_json(result)
        if not isinstance(body, dict):
            return self._decode_failure(COURIER_CHECK_PATH, "not a JSON object", field="error")

        if body.get("status") == "error":
            raw_error = body.get("error")
            message = str(raw_error) if raw_error else UNKNOWN_ERROR_MESSAGE
            not_found = result.status_code == 404 or "not found" in message.lower()
            logger.info("courier-check rejected by upstream (not_found=%s)", not_found)
            return error_outcome(message, 404 if not_found else 400)

        try:
            data = decode_courier_check(body)
        except UpstreamDecodeError as exc:
            return self._decode_failure(COURIER_CHECK_PATH, str(exc), field="error")

        logger.info("courier-check ok: %s parcels on record", data.summary.total_parcel)
        return GatewayOutcome(kind="success", status_code=200, body=body, data=data)
