import httpx
import asyncio
import logging
import time
from app.core.config import settings
from app.core.metrics import webhook_deliveries, webhook_duration

logger = logging.getLogger(__name__)


def booking_event(event: str, booking) -> dict:
    return {
        "event": event,
        "booking_id": booking.id,
        "car_id": booking.car_id,
        "status": str(booking.status),
        "start_date": booking.start_date.isoformat(),
        "end_date": booking.end_date.isoformat(),
        "total_price": str(booking.total_price),
    }


async def send_webhook(payload: dict, retries: int | None = None) -> bool:

    if not settings.WEBHOOK_URL:
        logger.debug(f"No webhook configured, dropping {payload.get('event')} event")
        return False

    if retries is None:
        retries = settings.WEBHOOK_RETRIES

    backoff = 1.0
    ref = payload.get("booking_id") or payload.get("email_id")

    for attempt in range(1, retries + 1):
        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT) as client:
                response = await client.post(settings.WEBHOOK_URL, json=payload)

                if 200 <= response.status_code < 300:
                    webhook_deliveries.labels(status="success").inc()
                    webhook_duration.labels(status="success").observe(time.time() - start_time)
                    logger.info(f"Webhook {payload.get('event')} delivered for {ref}")
                    return True
                else:
                    logger.warning(
                        f"Webhook delivery failed (attempt {attempt}/{retries}): "
                        f"Status {response.status_code} for {ref}"
                    )
        except httpx.TimeoutException:
            logger.warning(
                f"Webhook timeout (attempt {attempt}/{retries}) for {ref}"
            )
        except Exception as e:
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for {ref}"
            )

        webhook_deliveries.labels(status="failed").inc()
        webhook_duration.labels(status="failed").observe(time.time() - start_time)

        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0

    logger.error(f"Webhook delivery failed after {retries} attempts for {ref}")
    return False
