import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.db.session import build_engine
from app.services.email_scheduler import process_due_emails

logger = logging.getLogger(__name__)

engine_worker = build_engine(settings.DATABASE_URL)
AsyncSessionWorker = sessionmaker(engine_worker, class_=AsyncSession, expire_on_commit=False)


async def process_scheduled_emails_async(now: Optional[datetime] = None) -> List[str]:
    """Background task that sends every scheduled email that has come due"""
    now = now or datetime.now(timezone.utc)
    async with AsyncSessionWorker() as db:
        sent = await process_due_emails(db, now)
    if sent:
        logger.info(f"Processed {len(sent)} scheduled emails")
    return [email.id for email in sent]
