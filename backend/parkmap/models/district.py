# backend/parkmap/models/district.py
from sqlalchemy import Integer, String, Float, JSON, Column, DateTime, func
from .base import Base


class District(Base):
    __tablename__ = "districts"
    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=True)
    geometry = Column(JSON, nullable=True)  # GeoJSON Polygon (EPSG:4326)
    area = Column(Float, nullable=True)  # m²
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
