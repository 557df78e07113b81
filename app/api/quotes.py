"""Rental quote endpoint with Redis caching"""
import json
import hashlib
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.quote import QuoteRequest, QuoteResponse
from app.services.availability import DateRange
from app.services.pricing import calculate_quote
from app.core.auth_utils import check_not_found
from app.core.metrics import cache_hits, cache_misses
from app.core.redis import get_redis
from app.core.config import settings
from app.db.repositories import CarRepository
from app.db.session import get_db

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _generate_cache_key(req: QuoteRequest, price_per_day) -> str:
    # the daily rate is part of the key so a price change is never served stale
    params = req.model_dump(mode="json")
    params["price_per_day"] = str(price_per_day)
    params_str = json.dumps(params, sort_keys=True)
    return f"price:{hashlib.sha256(params_str.encode()).hexdigest()}"


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(req: QuoteRequest, db: AsyncSession = Depends(get_db)):
    car = await CarRepository(db).get(req.car_id)
    check_not_found(car, "Car", req.car_id)
    range_ = DateRange(req.start_date, req.end_date).validate()

    cache_key = _generate_cache_key(req, car.price_per_day)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache="quotes").inc()
                return QuoteResponse.model_validate_json(cached)
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")
        cache_misses.labels(cache="quotes").inc()

    result = calculate_quote(car, range_, include_tax=req.include_tax)

    if redis is not None:
        try:
            await redis.set(
                cache_key,
                result.model_dump_json(),
                ex=settings.PRICE_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result
