from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class InitializePaymentRequest(BaseModel):
    # Presence is validated in PaymentService.
    amount: Optional[float] = None
    email: Optional[str] = None
    reference: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class InitializePaymentResponse(BaseModel):
    success: bool = True
    access_code: str
    authorization_url: str
    reference: str


class VerifyPaymentRequest(BaseModel):
    reference: Optional[str] = None


class PaymentCustomer(BaseModel):
    email: Optional[str] = None
    customer_code: Optional[str] = None


class VerifyPaymentResponse(BaseModel):
    success: bool
    status: Optional[str] = None
    reference: Optional[str] = None
    amount: float
    currency: Optional[str] = None
    paid_at: Optional[str] = None
    channel: Optional[str] = None
    authorization: Optional[dict[str, Any]] = None
    customer: PaymentCustomer


class OrderNotificationRequest(BaseModel):
    order_id: str
    user_id: str
    status: str
    restaurant_name: str
    estimated_time: Optional[str] = None


class DriverLocationNotificationRequest(BaseModel):
    order_id: str
    user_id: str
    driver_name: str
    driver_phone: Optional[str] = None
    driver_lat: float = Field(ge=-90, le=90)
    driver_lng: float = Field(ge=-180, le=180)
    customer_lat: float = Field(ge=-90, le=90)
    customer_lng: float = Field(ge=-180, le=180)
    distance_km: Optional[float] = Field(default=None, ge=0)
    eta_minutes: Optional[float] = Field(default=None, ge=0)


class PromotionalNotificationRequest(BaseModel):
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    image_url: Optional[str] = None
    action_url: Optional[str] = None
    target_users: list[str] = Field(default_factory=list)
    target_segments: list[str] = Field(default_factory=list)
    restaurant_id: Optional[str] = None
