from sqlalchemy import Column, String, Float, DateTime, ForeignKey, JSON, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from bloodbank.database.database import Base, generate_uuid
from bloodbank.models.blood_unit import BloodGroup

def default_charges() -> dict:
    return {group.value: 0 for group in BloodGroup}

class BloodBank(Base):
    __tablename__ = "blood_banks"

    id = Column(Uuid, primary_key=True, default=generate_uuid)
    name = Column(String, unique=True, index=True, nullable=False)
    contact_email = Column(String, unique=True, index=True, nullable=False)
    contact_phone = Column(String, nullable=False)

    # Address
    street = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    country = Column(String, nullable=False)

    # GeoJSON-style point, stored only (no proximity search)
    location_type = Column(String, nullable=False, default="Point")
    longitude = Column(Float, nullable=False, default=0.0)
    latitude = Column(Float, nullable=False, default=0.0)

    charges = Column(JSON, nullable=False, default=default_charges)  # price per unit, keyed by blood group
    managed_by_id = Column(Uuid, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    managed_by = relationship("User")

    @property
    def address(self) -> dict:
        """Nested address with its GeoJSON point, the shape clients send and read."""
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "country": self.country,
            "location": {
                "type": self.location_type or "Point",
                "coordinates": [self.longitude or 0.0, self.latitude or 0.0],
            },
        }
