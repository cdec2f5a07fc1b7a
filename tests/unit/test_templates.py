import pytest

from src.notifications.templates import (
    OrderStatus,
    ProximityTier,
    classify_distance,
    driver_proximity_template,
    order_status_template,
)


@pytest.mark.parametrize("status", [s.value for s in OrderStatus])
def test_every_known_status_has_a_template(status: str) -> None:
    template = order_status_template(status, "Mama Put")

    assert template.title
    assert template.body
    assert template.title != "Order Update"


def test_out_for_delivery_includes_eta_only_when_given() -> None:
    with_eta = order_status_template("out_for_delivery", "Mama Put", "15 mins")
    without_eta = order_status_template("out_for_delivery", "Mama Put")

    assert with_eta.body == "Your order from Mama Put is on the way! ETA: 15 mins"
    assert without_eta.body == "Your order from Mama Put is on the way!"


def test_unknown_status_falls_back_with_raw_status() -> None:
    template = order_status_template("Refund_Pending", "Mama Put")

    assert template.title == "Order Update"
    assert template.body == "Your order from Mama Put status: Refund_Pending"


@pytest.mark.parametrize(
    ("distance", "tier"),
    [
        (0.0, ProximityTier.VERY_CLOSE),
        (0.49, ProximityTier.VERY_CLOSE),
        (0.5, ProximityTier.NEARBY),
        (1.49, ProximityTier.NEARBY),
        (1.5, ProximityTier.EN_ROUTE),
        (12.0, ProximityTier.EN_ROUTE),
    ],
)
def test_distance_tier_boundaries(distance: float, tier: ProximityTier) -> None:
    assert classify_distance(distance) is tier


def test_driver_templates_per_tier() -> None:
    tier, very_close = driver_proximity_template("Tunde", 0.3, 1)
    assert tier.value == "driver_very_near"
    assert very_close.body == "Tunde is arriving in about 1 minute. Get ready!"

    _, very_close_plural = driver_proximity_template("Tunde", 0.45, 2)
    assert "2 minutes" in very_close_plural.body

    tier, nearby = driver_proximity_template("Tunde", 1.04, 3)
    assert tier.value == "driver_nearby"
    assert nearby.body == "Tunde is 1.0 km away (3 min)"

    tier, en_route = driver_proximity_template("Tunde", 4.26, 9)
    assert tier.value == "driver_location_update"
    assert en_route.body == "Tunde is on the way - 4.3 km away (ETA: 9 min)"
