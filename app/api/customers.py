from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.audit_decorator import audit_log
from app.core.auth_utils import check_not_found
from app.core.enums import AuditAction, CustomerStatus, NotificationPriority, NotificationType
from app.core.response_builders import build_booking_response, build_customer_response, build_response_list
from app.core.security import require_admin
from app.db.repositories import BookingRepository, CustomerRepository
from app.db.session import get_db
from app.schemas.booking import BookingOut
from app.schemas.customer import CustomerOut, CustomerUpdate
from app.services.notifications import notify

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("", response_model=List[CustomerOut])
async def list_customers(
    search: Optional[str] = Query(None),
    status: Optional[CustomerStatus] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    customers = await CustomerRepository(db).search(query=search, status=status, limit=limit, offset=offset)
    return build_response_list(build_customer_response, customers)


@router.get("/{customer_id}", response_model=CustomerOut)
async def get_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    customer = await CustomerRepository(db).get(customer_id)
    check_not_found(customer, "Customer", customer_id)
    return build_customer_response(customer)


@router.get("/{customer_id}/bookings", response_model=List[BookingOut])
async def customer_bookings(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    customer = await CustomerRepository(db).get(customer_id)
    check_not_found(customer, "Customer", customer_id)
    bookings = await BookingRepository(db).for_customer(customer.id)
    return build_response_list(build_booking_response, bookings)


@router.put("/{customer_id}", response_model=CustomerOut)
@audit_log(AuditAction.UPDATE_CUSTOMER)
async def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = CustomerRepository(db)
    customer = await repo.get(customer_id)
    check_not_found(customer, "Customer", customer_id)

    values = payload.model_dump(exclude_unset=True)
    for required in ("name", "email", "status"):
        if required in values and values[required] is None:
            raise HTTPException(status_code=422, detail=f"{required} cannot be null")
    if values.get("email"):
        values["email"] = values["email"].lower()
        other = await repo.by_email(values["email"])
        if other and other.id != customer.id:
            raise HTTPException(status_code=409, detail="Another customer already uses this email")

    await repo.update(customer, values)
    await notify(
        db,
        NotificationType.CUSTOMER_UPDATE,
        "Customer Updated",
        f"Customer {customer.name} has been updated",
        priority=NotificationPriority.LOW,
        related_id=customer.id,
    )
    await db.commit()
    await db.refresh(customer)
    return build_customer_response(customer)


@router.delete("/{customer_id}")
@audit_log(AuditAction.DELETE_CUSTOMER)
async def delete_customer(
    customer_id: str,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(require_admin),
):
    repo = CustomerRepository(db)
    customer = await repo.get(customer_id)
    check_not_found(customer, "Customer", customer_id)

    await repo.delete(customer)
    await db.commit()
    return {"deleted": True}
