from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.repositories import CustomerRepository
from app.models.customer import Customer


async def record_booking_for_customer(
    db: AsyncSession,
    name: str,
    email: str,
    phone: str,
    amount: Decimal,
) -> Customer:
    """Create the customer on first booking, otherwise bump their totals."""
    repo = CustomerRepository(db)
    customer = await repo.by_email(email)
    if customer is None:
        customer = Customer(
            name=name,
            email=email.lower(),
            phone=phone,
            total_bookings=1,
            total_spent=amount,
        )
        return await repo.add(customer)

    return await repo.update(customer, {
        "name": name or customer.name,
        "phone": phone or customer.phone,
        "total_bookings": (customer.total_bookings or 0) + 1,
        "total_spent": Decimal(str(customer.total_spent or 0)) + amount,
    })
