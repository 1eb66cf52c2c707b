from sqlalchemy import Column, Float, Integer, String

from core.models import Base, TimestampMixin


class RawMaterial(Base, TimestampMixin):
    __tablename__ = "raw_materials"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(32), nullable=False)
    stock = Column(Float, nullable=False, default=0.0)
    unit_cost = Column(Float, nullable=False, default=0.0)
    supplier = Column(String(255), nullable=True)
