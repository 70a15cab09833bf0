from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from app.database import Base


class ServiceType(Base):
    __tablename__ = 'service_types'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), unique=True, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    DEFAULTS = [
        'Steel Structure',
        'Metal Roofing',
        'Side Cladding',
        'Mezzanine',
        'Gutters and Flashing',
        'Installation',
        'Structural Design',
    ]

    def __repr__(self):
        return f"<ServiceType {self.name}>"
