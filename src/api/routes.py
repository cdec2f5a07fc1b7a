from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx
from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse

from src.config import ConfigurationError, Settings, get_settings
from src.integrations.paystack_client import PaystackClient, PaystackError
from src.models.schemas import InitializePaymentRequest, VerifyPaymentRequest
from src.services.payment_service import PaymentService, PaymentValidationError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["food-delivery-backend"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


async def get_paystack_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[PaystackClient]:
    client = PaystackClient.from_settings(settings)
    try:
        yield client
    finally:
        await client.aclose()


def _cors_json(content: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


async def _run_payment_call(call, action: str, reference: str | None) -> JSONResponse:
    try:
        result = await call
    except PaymentValidationError as exc:
        return _cors_json({"error": str(exc)}, status_code=400)
    except (ConfigurationError, PaystackError) as exc:
        logger.error("Payment %s failed", action, extra={"reference": reference, "error": str(exc)})
        return _cors_json({"error": str(exc)}, status_code=500)
    except httpx.HTTPError as exc:
        logger.error("Paystack unreachable during %s", action, extra={"reference": reference, "error": str(exc)})
        return _cors_json({"error": str(exc) or "Payment gateway unreachable"}, status_code=500)
    except Exception as exc:
        logger.exception("Unexpected payment %s failure", action, extra={"reference": reference})
        return _cors_json({"error": str(exc)}, status_code=500)
    return _cors_json(result.model_dump())


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict:
    return {"status": "ok", "service": settings.app_name}


@router.options("/payments/initialize")
@router.options("/payments/verify")
def payments_preflight() -> Response:
    return Response(content="ok", headers=CORS_HEADERS)


@router.post("/payments/initialize")
async def initialize_payment(
    payload: InitializePaymentRequest,
    client: PaystackClient = Depends(get_paystack_client),
):
    service = PaymentService(client)
    return await _run_payment_call(service.initialize(payload), "initialize", payload.reference)


@router.post("/payments/verify")
async def verify_payment(
    payload: VerifyPaymentRequest,
    client: PaystackClient = Depends(get_paystack_client),
):
    service = PaymentService(client)
    return await _run_payment_call(service.verify(payload), "verify", payload.reference)
