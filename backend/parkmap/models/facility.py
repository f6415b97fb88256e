# backend/parkmap/models/facility.py
from sqlalchemy import Integer, String, Text, Float, Column, DateTime, ForeignKey, func
from .base import Base


class Facility(Base):
    __tablename__ = "facilities"
    id = Column(Integer, primary_key=True)
    external_id = Column(String, nullable=True)
    name = Column(String, nullable=True)
    type = Column(String, nullable=True, index=True)  # FacilityType
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    photo = Column(String, nullable=True)  # 公開URL
    description = Column(Text, nullable=True)
    area = Column(String, nullable=True)  # 自由記述（例: "120 m²"）
    maf_count = Column(Integer, nullable=True)
    type_coverage = Column(String, nullable=True)
    contract_action = Column(String, nullable=True)
    contract_with = Column(String, nullable=True)
    contract_term = Column(String, nullable=True)  # "[YYYY-MM-DD,YYYY-MM-DD)"
    park_id = Column(
        Integer, ForeignKey("parks.id", ondelete="CASCADE"), nullable=True, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
