from __future__ import annotations

import asyncio
from collections.abc import Sequence

from src.models.notification import DeliveryResult, PushMessage
from src.notifications.providers import BaseNotificationProvider


def chunk(items: Sequence[str], size: int) -> list[list[str]]:
    safe_size = max(1, int(size))
    return [list(items[idx : idx + safe_size]) for idx in range(0, len(items), safe_size)]


async def _deliver(provider: BaseNotificationProvider, message: PushMessage, token: str) -> DeliveryResult:
    try:
        return await provider.send(message, token)
    except Exception as exc:
        return DeliveryResult(success=False, error=str(exc) or type(exc).__name__)


async def dispatch(
    provider: BaseNotificationProvider,
    message: PushMessage,
    tokens: Sequence[str],
) -> list[DeliveryResult]:
    """Send ``message`` to every token concurrently; one failure never cancels its siblings."""
    if not tokens:
        return []
    return list(await asyncio.gather(*(_deliver(provider, message, token) for token in tokens)))


async def dispatch_in_batches(
    provider: BaseNotificationProvider,
    message: PushMessage,
    tokens: Sequence[str],
    batch_size: int,
) -> list[DeliveryResult]:
    results: list[DeliveryResult] = []
    for batch in chunk(tokens, batch_size):
        results.extend(await dispatch(provider, message, batch))
    return results


def count_sent(results: Sequence[DeliveryResult]) -> int:
    return sum(1 for result in results if result.success)
