import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import (
    AppException,
    InsufficientStockException,
    NotFoundException,
    PersistenceException,
    ValidationAppException,
)
from core.settings import Settings
from modules.products import models as product_models
from modules.raw_materials import models as raw_material_models
from modules.transactions import models, schemas

logger = logging.getLogger(__name__)

# Raw material stock is a float; sums of fractional recipe amounts carry rounding noise
STOCK_TOLERANCE = 1e-9


class CheckoutService:
    """Posts a completed sale.

    Every read, stock decrement and insert runs inside the session's single
    database transaction; any failure rolls all of it back.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def checkout(self, db: Session, checkout_in: schemas.CheckoutRequest) -> Dict[str, Any]:
        self._validate(checkout_in)
        try:
            transaction = self._post(db, checkout_in)
            db.commit()
        except AppException as exc:
            db.rollback()
            logger.info("Checkout rolled back: %s", exc.message)
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Checkout failed while writing to the database")
            raise PersistenceException("Checkout failed") from exc

        logger.info(
            "Checkout committed: transaction %s, %d line(s), total %.2f",
            transaction.id,
            len(checkout_in.items),
            transaction.total,
        )
        return {"message": "Checkout completed successfully", "transactionId": transaction.id}

    def _validate(self, checkout_in: schemas.CheckoutRequest) -> None:
        if not checkout_in.items:
            raise ValidationAppException("Items cannot be empty")
        if not (checkout_in.payment_method or "").strip() or not (checkout_in.cashier_name or "").strip():
            raise ValidationAppException("Payment method and cashier name are required")

    def _post(self, db: Session, checkout_in: schemas.CheckoutRequest) -> models.Transaction:
        products: Dict[int, product_models.Product] = {}
        materials: Dict[int, raw_material_models.RawMaterial] = {}
        sold: Dict[int, int] = defaultdict(int)
        consumed: Dict[int, float] = defaultdict(float)
        subtotal = 0.0
        profit = 0.0
        lines: List[models.TransactionItem] = []

        for item in checkout_in.items:
            product = products.get(item.product_id)
            if product is None:
                product = (
                    db.query(product_models.Product)
                    .filter(product_models.Product.id == item.product_id)
                    .with_for_update()
                    .populate_existing()
                    .first()
                )
                if not product:
                    raise NotFoundException(f"Product with ID {item.product_id} not found")
                products[product.id] = product

            # Repeated lines for one product draw on the same stock
            sold[product.id] += item.quantity
            if product.stock < sold[product.id]:
                raise InsufficientStockException(product.name, product.stock, sold[product.id])

            line_total = product.price * item.quantity
            line_profit = (product.price - product.cost_price) * item.quantity
            subtotal += line_total
            profit += line_profit

            db.query(product_models.Product).filter(product_models.Product.id == product.id).update(
                {product_models.Product.stock: product_models.Product.stock - item.quantity},
                synchronize_session=False,
            )

            for ingredient in product.ingredients:
                needed = ingredient.amount * item.quantity
                material = self._lock_material(db, materials, ingredient.raw_material_id)
                consumed[material.id] += needed
                if consumed[material.id] - material.stock > STOCK_TOLERANCE:
                    if not self.settings.allow_negative_material_stock:
                        raise InsufficientStockException(material.name, material.stock, consumed[material.id])
                    logger.warning(
                        "Raw material %s (%s) goes negative: stock %g, consumed %g",
                        material.id,
                        material.name,
                        material.stock,
                        consumed[material.id],
                    )
                db.query(raw_material_models.RawMaterial).filter(
                    raw_material_models.RawMaterial.id == material.id
                ).update(
                    {raw_material_models.RawMaterial.stock: raw_material_models.RawMaterial.stock - needed},
                    synchronize_session=False,
                )

            lines.append(
                models.TransactionItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=product.price,
                    cost_price=product.cost_price,
                    total_price=line_total,
                    profit=line_profit,
                )
            )

        discount = checkout_in.discount or 0.0
        tax = checkout_in.tax or 0.0
        transaction = models.Transaction(
            date=datetime.utcnow(),
            subtotal=subtotal,
            discount=discount,
            tax=tax,
            total=subtotal - discount + tax,
            profit=profit,
            payment_method=checkout_in.payment_method.strip(),
            cashier_name=checkout_in.cashier_name.strip(),
            customer_name=checkout_in.customer_name or None,
            notes=checkout_in.notes or None,
            items=lines,
        )
        db.add(transaction)
        db.flush()
        return transaction

    def _lock_material(
        self, db: Session, materials: Dict[int, raw_material_models.RawMaterial], raw_material_id: int
    ) -> raw_material_models.RawMaterial:
        material = materials.get(raw_material_id)
        if material is None:
            material = (
                db.query(raw_material_models.RawMaterial)
                .filter(raw_material_models.RawMaterial.id == raw_material_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if not material:
                raise NotFoundException(f"Raw material with ID {raw_material_id} not found")
            materials[material.id] = material
        return material


def _serialize_transaction(transaction: models.Transaction) -> Dict[str, Any]:
    return {
        "id": transaction.id,
        "date": transaction.date,
        "subtotal": transaction.subtotal,
        "discount": transaction.discount,
        "tax": transaction.tax,
        "total": transaction.total,
        "profit": transaction.profit,
        "payment_method": transaction.payment_method,
        "cashier_name": transaction.cashier_name,
        "customer_name": transaction.customer_name,
        "notes": transaction.notes,
        "items": [
            {
                "id": item.id,
                "product_id": item.product_id,
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "cost_price": item.cost_price,
                "total_price": item.total_price,
                "profit": item.profit,
            }
            for item in transaction.items
        ],
    }


def list_transactions(db: Session) -> List[Dict[str, Any]]:
    transactions = db.query(models.Transaction).order_by(models.Transaction.date.desc(), models.Transaction.id.desc()).all()
    return [_serialize_transaction(t) for t in transactions]


def get_transaction(db: Session, transaction_id: int) -> Dict[str, Any]:
    transaction = db.query(models.Transaction).filter(models.Transaction.id == transaction_id).first()
    if not transaction:
        raise NotFoundException("Transaction not found")
    return _serialize_transaction(transaction)
