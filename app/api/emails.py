from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found
from app.core.enums import AuditAction
from app.core.response_builders import build_email_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import BookingRepository, ScheduledEmailRepository
from app.db.session import get_db
from app.schemas.email import ProcessEmailsOut, ScheduledEmailOut, ScheduleEmailRequest
from app.services.email_scheduler import cancel_email, process_due_emails, schedule_email

router = APIRouter(prefix="/emails", tags=["emails"])


@router.post("", response_model=ScheduledEmailOut, status_code=201)
@audit_log(AuditAction.SCHEDULE_EMAIL)
async def create_scheduled_email(
    payload: ScheduleEmailRequest,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    booking = await BookingRepository(db).get(payload.booking_id)
    check_not_found(booking, "Booking", payload.booking_id)
    email = await schedule_email(db, booking, payload.type, payload.days)
    return build_email_response(email)


@router.get("", response_model=List[ScheduledEmailOut])
async def list_scheduled_emails(
    booking_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = ScheduledEmailRepository(db)
    emails = await repo.for_booking(booking_id) if booking_id else await repo.list()
    return build_response_list(build_email_response, emails)


@router.post("/process", response_model=ProcessEmailsOut)
async def process_emails(
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    sent = await process_due_emails(db)
    return ProcessEmailsOut(processed=len(sent), sent_ids=[e.id for e in sent])


@router.delete("/{email_id}", response_model=ScheduledEmailOut)
@audit_log(AuditAction.CANCEL_EMAIL)
async def cancel_scheduled_email(
    email_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    email = await ScheduledEmailRepository(db).get(email_id)
    check_not_found(email, "Scheduled email", email_id)
    email = await cancel_email(db, email)
    return build_email_response(email)
