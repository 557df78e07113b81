from sqlalchemy import Column, String, Float
from app.models.base import BaseModel


class Location(BaseModel):
    __tablename__ = "locations"
    name = Column(String(120), nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(120), nullable=False)
    state = Column(String(40))
    zip_code = Column(String(20))
    phone = Column(String(40))
    email = Column(String(120))
    hours = Column(String(255))
    latitude = Column(Float)
    longitude = Column(Float)
