from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth_utils import check_not_found
from app.core.enums import NotificationPriority
from app.core.response_builders import build_notification_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import NotificationRepository
from app.db.session import get_db
from app.schemas.notification import NotificationOut, UnreadCountOut

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
async def list_notifications(
    unread_only: bool = Query(False),
    priority: Optional[NotificationPriority] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    items = await NotificationRepository(db).filter(unread_only=unread_only, priority=priority, limit=limit)
    return build_response_list(build_notification_response, items)


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    return UnreadCountOut(unread=await NotificationRepository(db).unread_count())


@router.get("/recent", response_model=List[NotificationOut])
async def recent_notifications(
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    items = await NotificationRepository(db).filter(limit=limit)
    return build_response_list(build_notification_response, items)


@router.post("/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    updated = await NotificationRepository(db).mark_all_read()
    await db.commit()
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = NotificationRepository(db)
    item = await repo.get(notification_id)
    check_not_found(item, "Notification", notification_id)
    await repo.update(item, {"read": True})
    await db.commit()
    await db.refresh(item)
    return build_notification_response(item)


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = NotificationRepository(db)
    item = await repo.get(notification_id)
    check_not_found(item, "Notification", notification_id)
    await repo.delete(item)
    await db.commit()
    return {"deleted": True}


@router.delete("")
async def clear_notifications(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    deleted = await NotificationRepository(db).clear()
    await db.commit()
    return {"deleted": deleted}
