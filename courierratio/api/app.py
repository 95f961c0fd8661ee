# file: courierratio/api/app.py
"""
FastAPI application exposing the JSON contract used by the web front end.

Routes mirror the upstream endpoints 1:1 and always answer with either the
upstream success body or `{"status": "error", ...}`:

    GET  /api/check-connection
    GET  /api/my-plan
    POST /api/courier-check       {"phone": "..."}

plus `/api/courier-report` (risk assessment of a check), `/api/normalize`
(server-side mirror of the live preview) and `/health`.

Run with `courierratio serve`, or `uvicorn --factory courierratio.api.app:create_app`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from courierratio import __version__
from courierratio.config import CourierRatioSettings, load_settings
from courierratio.core.enrich import enrich_phone
from courierratio.core.phone import (
    INVALID_PHONE_MESSAGE,
    BdPhoneNumber,
    normalize_bd_phone,
    preview_normalized,
)
from courierratio.gateway.client import GatewayOutcome, MissingApiKeyError, UpstreamGateway
from courierratio.net.http import make_async_client
from courierratio.risk.score import assess

logger = logging.getLogger(__name__)


def _respond(outcome: GatewayOutcome) -> JSONResponse:
    return JSONResponse(outcome.body, status_code=outcome.status_code)


def _invalid_phone() -> JSONResponse:
    return JSONResponse({"status": "error", "error": INVALID_PHONE_MESSAGE}, status_code=400)


async def _phone_from_request(request: Request) -> BdPhoneNumber | None:
    # Unparseable bodies and non-string phones are treated as empty input.
    try:
        body: Any = await request.json()
    except ValueError:
        body = None
    raw = body.get("phone") if isinstance(body, dict) else None
    return normalize_bd_phone(raw if isinstance(raw, str) else "")


def build_app(
    settings: CourierRatioSettings | None = None,
    *,
    gateway: UpstreamGateway | None = None,
) -> FastAPI:
    """
    Build the API app.

    Without an injected `gateway`, one is built from `settings` on a client the
    app owns and closes at shutdown. A missing API key is logged here and every
    proxied route then answers 500.
    """

    settings = settings if settings is not None else load_settings()

    owned_client: httpx.AsyncClient | None = None
    if gateway is None:
        owned_client = make_async_client(settings.http_config())
        try:
            gateway = UpstreamGateway(
                client=owned_client, api_key=settings.api_key, base_url=settings.base_url
            )
        except MissingApiKeyError as exc:
            logger.error("upstream gateway disabled: %s", exc)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        if owned_client is not None:
            await owned_client.aclose()

    app = FastAPI(title="Courier Ratio API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.gateway = gateway

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET", "POST"],
            allow_headers=["Content-Type"],
        )

    @app.exception_handler(MissingApiKeyError)
    async def _missing_api_key(_request: Request, exc: MissingApiKeyError) -> JSONResponse:
        return JSONResponse(
            {"status": "error", "error": f"Server misconfigured: {exc}"}, status_code=500
        )

    def current_gateway() -> UpstreamGateway:
        gw: UpstreamGateway | None = app.state.gateway
        if gw is None:
            raise MissingApiKeyError("BDCOURIER_API_KEY is not set")
        return gw

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/normalize")
    async def normalize(phone: str = "") -> dict[str, Any]:
        canonical = normalize_bd_phone(phone)
        return {
            "input": phone,
            "phone": canonical,
            "valid": canonical is not None,
            "preview": preview_normalized(phone),
        }

    @app.get("/api/check-connection")
    async def check_connection() -> JSONResponse:
        return _respond(await current_gateway().check_connection())

    @app.get("/api/my-plan")
    async def my_plan() -> JSONResponse:
        return _respond(await current_gateway().get_my_plan())

    @app.post("/api/courier-check")
    async def courier_check(request: Request) -> JSONResponse:
        phone = await _phone_from_request(request)
        if phone is None:
            return _invalid_phone()
        return _respond(await current_gateway().courier_check(phone))

    @app.post("/api/courier-report")
    async def courier_report(request: Request) -> JSONResponse:
        phone = await _phone_from_request(request)
        if phone is None:
            return _invalid_phone()

        outcome = await current_gateway().courier_check(phone)
        if not outcome.ok:
            return _respond(outcome)

        enrichment = enrich_phone(phone)
        return JSONResponse(
            {
                "status": "success",
                "phone": phone,
                "e164": enrichment.e164,
                "operator": enrichment.operator,
                "assessment": assess(outcome.data).to_dict(),
            }
        )

    return app


def create_app() -> FastAPI:
    """uvicorn `--factory` entry point: settings come from the environment."""

    return build_app(load_settings())
