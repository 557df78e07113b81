from sqlalchemy import Column, String, Integer, Numeric, Boolean, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import Transmission, FuelType, CarType


class Car(BaseModel):
    __tablename__ = "cars"
    make = Column(String(80), nullable=False)
    model = Column(String(80), nullable=False)
    year = Column(Integer, nullable=False)
    transmission = Column(Enum(Transmission), nullable=False)
    fuel_type = Column(Enum(FuelType), nullable=False)
    seats = Column(Integer, nullable=False)
    price_per_day = Column(Numeric(10, 2), nullable=False)
    car_type = Column(Enum(CarType), nullable=True)
    color = Column(String(40))
    license_plate = Column(String(20))
    description = Column(Text)
    image = Column(String(255))
    available = Column(Boolean, default=True, nullable=False)
    popularity = Column(Integer, default=0, nullable=False)

    location_id = Column(ForeignKey("locations.id"), nullable=False, index=True)
    location = relationship("Location", backref="cars")
