from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found
from app.core.enums import AuditAction
from app.core.response_builders import build_document_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import BookingRepository, CarRepository, DocumentRepository, LocationRepository
from app.db.session import get_db
from app.schemas.document import DocumentCreate, DocumentOut
from app.services.documents import generate_document

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentOut, status_code=201)
@audit_log(AuditAction.GENERATE_DOCUMENT)
async def create_document(
    payload: DocumentCreate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    booking = await BookingRepository(db).get(payload.booking_id)
    check_not_found(booking, "Booking", payload.booking_id)
    if not booking.car_id:
        raise HTTPException(status_code=409, detail="The car for this booking no longer exists")
    car = await CarRepository(db).get(booking.car_id)
    location = await LocationRepository(db).get(booking.location_id)

    document = await generate_document(db, payload.type, booking, car, location)
    return build_document_response(document)


@router.get("", response_model=List[DocumentOut])
async def list_documents(
    booking_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = DocumentRepository(db)
    documents = await repo.for_booking(booking_id) if booking_id else await repo.list()
    return build_response_list(build_document_response, documents)


@router.get("/{document_id}", response_class=HTMLResponse)
async def get_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    document = await DocumentRepository(db).get(document_id)
    check_not_found(document, "Document", document_id)
    return HTMLResponse(
        content=document.content,
        headers={"Content-Disposition": f'inline; filename="{document.filename}"'},
    )


@router.delete("/{document_id}")
@audit_log(AuditAction.DELETE_DOCUMENT)
async def delete_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = DocumentRepository(db)
    document = await repo.get(document_id)
    check_not_found(document, "Document", document_id)
    await repo.delete(document)
    await db.commit()
    return {"deleted": True}
