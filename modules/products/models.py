from sqlalchemy import Boolean, CheckConstraint, Column, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from core.models import Base, TimestampMixin


class Product(Base, TimestampMixin):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    price = Column(Float, nullable=False, default=0.0)
    cost_price = Column(Float, nullable=False, default=0.0)
    # When false, cost_price is always the recipe rollup
    manual_cost = Column(Boolean, nullable=False, default=False)
    stock = Column(Integer, nullable=False, default=0)
    image = Column(String(1024), nullable=True)

    ingredients = relationship(
        "ProductIngredient",
        cascade="all, delete-orphan",
        back_populates="product",
        order_by="ProductIngredient.id",
    )


class ProductIngredient(Base):
    __tablename__ = "product_ingredients"
    __table_args__ = (
        UniqueConstraint("product_id", "raw_material_id", name="uq_product_ingredient"),
        CheckConstraint("amount >= 0", name="ck_product_ingredient_amount"),
    )

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    raw_material_id = Column(Integer, ForeignKey("raw_materials.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Float, nullable=False, default=0.0)

    product = relationship("Product", back_populates="ingredients")
    raw_material = relationship("RawMaterial")
