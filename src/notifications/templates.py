from __future__ import annotations

from enum import Enum
from typing import Callable, NamedTuple, Optional

VERY_CLOSE_KM = 0.5
NEARBY_KM = 1.5


class OrderStatus(str, Enum):
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY_FOR_PICKUP = "ready_for_pickup"
    OUT_FOR_DELIVERY = "out_for_delivery"
    NEARBY = "nearby"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ProximityTier(str, Enum):
    VERY_CLOSE = "driver_very_near"
    NEARBY = "driver_nearby"
    EN_ROUTE = "driver_location_update"


class Template(NamedTuple):
    title: str
    body: str


def _on_the_way(restaurant: str, eta: Optional[str]) -> str:
    if eta:
        return f"Your order from {restaurant} is on the way! ETA: {eta}"
    return f"Your order from {restaurant} is on the way!"


_STATUS_TEMPLATES: dict[OrderStatus, tuple[str, Callable[[str, Optional[str]], str]]] = {
    OrderStatus.CONFIRMED: ("✅ Order Confirmed", lambda r, _: f"Your order from {r} has been confirmed."),
    OrderStatus.PREPARING: ("👨‍🍳 Preparing Your Food", lambda r, _: f"{r} is preparing your order."),
    OrderStatus.READY_FOR_PICKUP: ("✨ Order Ready", lambda r, _: f"Your order from {r} is ready for pickup!"),
    OrderStatus.OUT_FOR_DELIVERY: ("🛵 On the Way", _on_the_way),
    OrderStatus.NEARBY: ("📍 Driver Nearby", lambda r, _: "Your driver is less than 1 km away!"),
    OrderStatus.DELIVERED: (
        "🎉 Delivered!",
        lambda r, _: f"Your order from {r} has been delivered. Enjoy your meal!",
    ),
    OrderStatus.CANCELLED: ("❌ Order Cancelled", lambda r, _: f"Your order from {r} has been cancelled."),
}


def order_status_template(status: str, restaurant_name: str, estimated_time: Optional[str] = None) -> Template:
    try:
        known = OrderStatus(status)
    except ValueError:
        return Template(title="Order Update", body=f"Your order from {restaurant_name} status: {status}")

    title, render_body = _STATUS_TEMPLATES[known]
    return Template(title=title, body=render_body(restaurant_name, estimated_time))


def classify_distance(distance_km: float) -> ProximityTier:
    if distance_km < VERY_CLOSE_KM:
        return ProximityTier.VERY_CLOSE
    if distance_km < NEARBY_KM:
        return ProximityTier.NEARBY
    return ProximityTier.EN_ROUTE


def driver_proximity_template(driver_name: str, distance_km: float, eta_minutes: int) -> tuple[ProximityTier, Template]:
    tier = classify_distance(distance_km)
    if tier is ProximityTier.VERY_CLOSE:
        plural = "s" if eta_minutes > 1 else ""
        return tier, Template(
            title="📍 Driver is Very Close!",
            body=f"{driver_name} is arriving in about {eta_minutes} minute{plural}. Get ready!",
        )
    if tier is ProximityTier.NEARBY:
        return tier, Template(
            title="🛵 Driver Nearby",
            body=f"{driver_name} is {distance_km:.1f} km away ({eta_minutes} min)",
        )
    return tier, Template(
        title="📱 Driver Location Update",
        body=f"{driver_name} is on the way - {distance_km:.1f} km away (ETA: {eta_minutes} min)",
    )
