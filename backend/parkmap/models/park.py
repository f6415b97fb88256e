# backend/parkmap/models/park.py
from sqlalchemy import Integer, String, Text, Float, JSON, Column, DateTime, ForeignKey, func
from .base import Base


class Park(Base):
    __tablename__ = "parks"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=True)
    description = Column(Text, nullable=True)
    geometry = Column(JSON, nullable=True)  # GeoJSON Polygon (EPSG:4326)
    area = Column(Float, nullable=True)  # m²
    balance_holder = Column(String, nullable=True)
    # 区が削除されても公園は残す（紐付けのみ解除）
    district_id = Column(
        Integer, ForeignKey("districts.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
