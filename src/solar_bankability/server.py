from __future__ import annotations

import logging
import math
import os
from typing import Any, Dict

from fastapi import FastAPI, Form, Request
from fastapi.responses import JSONResponse

from solar_bankability.agent import parse_structured_message, run_agent_from_data
from solar_bankability.calculator import compute
from solar_bankability.config import SERVICE_ACCOUNT_ENV, inputs_from_mapping
from solar_bankability.inputs import InputValidationError

logger = logging.getLogger(__name__)

app = FastAPI(title="Solar Bankability")


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats (e.g. a diverged IRR) with None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/calculate")
async def calculate(request: Request) -> JSONResponse:
    payload = await request.json()
    if not isinstance(payload, dict):
        return JSONResponse(
            status_code=422,
            content={"status": "invalid", "error": "Expected a JSON object of inputs."},
        )
    try:
        inputs = inputs_from_mapping(payload)
    except InputValidationError as exc:
        return JSONResponse(
            status_code=422,
            content={"status": "invalid", "field": exc.field, "error": str(exc)},
        )
    result = compute(inputs)
    return JSONResponse(status_code=200, content=_json_safe({"status": "ok", **result.to_dict()}))


@app.post("/webhooks/sms")
def sms_webhook(Body: str = Form(default="")) -> JSONResponse:
    return _handle_message(Body, channel="sms")


@app.post("/webhooks/whatsapp")
def whatsapp_webhook(Body: str = Form(default="")) -> JSONResponse:
    """Twilio WhatsApp inbound webhook compatible endpoint."""
    return _handle_message(Body, channel="whatsapp")


@app.post("/webhooks/email")
async def email_webhook(request: Request) -> JSONResponse:
    payload = await request.json()
    body = str(payload.get("text", ""))
    return _handle_message(body, channel="email")


def _handle_message(message_body: str, channel: str) -> JSONResponse:
    service_account_json = os.getenv(SERVICE_ACCOUNT_ENV, "")
    if not service_account_json:
        return JSONResponse(
            status_code=500,
            content={
                "status": "error",
                "error": f"Set {SERVICE_ACCOUNT_ENV} env var to your credential path.",
            },
        )

    try:
        data = parse_structured_message(message_body)
    except ValueError as exc:
        return JSONResponse(
            status_code=200,
            content={"status": "invalid", "channel": channel, "error": str(exc)},
        )
    sheet_title = data.pop("sheet_title", f"Solar Model ({channel})")

    result = run_agent_from_data(
        data=data,
        service_account_json_path=service_account_json,
        sheet_title=str(sheet_title),
    )
    logger.info("Handled %s message with status %s", channel, result["status"])

    if result["status"] == "needs_input":
        return JSONResponse(
            status_code=200,
            content={
                "status": "needs_input",
                "channel": channel,
                "message": "I need more details before building the model.",
                "missing": result["missing"],
            },
        )

    return JSONResponse(status_code=200, content=_json_safe({"channel": channel, **result}))
