from __future__ import annotations

import logging

from src.integrations.paystack_client import PaystackClient, PaystackError
from src.models.schemas import (
    InitializePaymentRequest,
    InitializePaymentResponse,
    PaymentCustomer,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)

logger = logging.getLogger(__name__)


class PaymentValidationError(ValueError):
    pass


class PaymentService:
    def __init__(self, client: PaystackClient) -> None:
        self.client = client

    async def initialize(self, payload: InitializePaymentRequest) -> InitializePaymentResponse:
        if not payload.amount or not payload.email or not payload.reference:
            raise PaymentValidationError("Missing required parameters")
        if payload.amount <= 0:
            raise PaymentValidationError("Amount must be greater than zero")

        amount = int(payload.amount) if float(payload.amount).is_integer() else payload.amount
        data = await self.client.initialize_transaction(
            amount=amount,
            email=payload.email,
            reference=payload.reference,
            metadata=payload.metadata,
        )
        try:
            return InitializePaymentResponse(
                access_code=data["access_code"],
                authorization_url=data["authorization_url"],
                reference=data["reference"],
            )
        except KeyError as exc:
            raise PaystackError(f"Paystack response missing field: {exc.args[0]}") from exc

    async def verify(self, payload: VerifyPaymentRequest) -> VerifyPaymentResponse:
        if not payload.reference:
            raise PaymentValidationError("Payment reference is required")

        data = await self.client.verify_transaction(payload.reference)
        status = data.get("status")
        customer = data.get("customer") or {}
        result = VerifyPaymentResponse(
            success=status == "success",
            status=status,
            reference=data.get("reference"),
            # Paystack amounts are in minor units (kobo/cents).
            amount=(data.get("amount") or 0) / 100,
            currency=data.get("currency"),
            paid_at=data.get("paid_at"),
            channel=data.get("channel"),
            authorization=data.get("authorization"),
            customer=PaymentCustomer(
                email=customer.get("email"),
                customer_code=customer.get("customer_code"),
            ),
        )
        logger.info("Payment verified", extra={"reference": result.reference, "status": status})
        return result
