import logging
from datetime import date
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import AppException, PersistenceException, ValidationAppException
from modules.purchases import models, schemas
from modules.raw_materials import models as raw_material_models
from modules.recipes import service as recipe_service

logger = logging.getLogger(__name__)


def _serialize_purchase(purchase: models.Purchase) -> Dict[str, Any]:
    return {
        "id": purchase.id,
        "date": purchase.date,
        "supplier": purchase.supplier,
        "notes": purchase.notes,
        "total_amount": purchase.total_amount,
        "items": [
            {
                "id": item.id,
                "raw_material_id": item.raw_material_id,
                "raw_material_name": item.raw_material.name,
                "unit": item.raw_material.unit,
                "quantity": item.quantity,
                "unit_cost": item.unit_cost,
                "total": item.total,
            }
            for item in purchase.items
        ],
    }


def list_purchases(db: Session) -> List[Dict[str, Any]]:
    purchases = db.query(models.Purchase).order_by(models.Purchase.date.desc(), models.Purchase.id.desc()).all()
    return [_serialize_purchase(p) for p in purchases]


def receive_purchase(db: Session, purchase_in: schemas.PurchaseCreate) -> Dict[str, Any]:
    """Record a purchase and add the received quantities to raw material stock.

    Line totals and the purchase total are always computed here; nothing
    monetary is taken from the client. Header, items and stock increments
    are committed together or not at all.
    """
    if not purchase_in.items:
        raise ValidationAppException("Items cannot be empty")

    try:
        recipe_service.load_materials(db, (item.raw_material_id for item in purchase_in.items))

        purchase = models.Purchase(
            date=purchase_in.date or date.today(),
            supplier=purchase_in.supplier,
            notes=purchase_in.notes,
            total_amount=0.0,
        )
        total_amount = 0.0
        for item in purchase_in.items:
            line_total = item.quantity * item.unit_cost
            total_amount += line_total
            purchase.items.append(
                models.PurchaseItem(
                    raw_material_id=item.raw_material_id,
                    quantity=item.quantity,
                    unit_cost=item.unit_cost,
                    total=line_total,
                )
            )
            db.query(raw_material_models.RawMaterial).filter(
                raw_material_models.RawMaterial.id == item.raw_material_id
            ).update(
                {raw_material_models.RawMaterial.stock: raw_material_models.RawMaterial.stock + item.quantity},
                synchronize_session=False,
            )
        purchase.total_amount = total_amount

        db.add(purchase)
        db.commit()
    except AppException:
        db.rollback()
        raise
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Purchase could not be recorded")
        raise PersistenceException("Error recording purchase") from exc

    db.refresh(purchase)
    logger.info("Received purchase %s: %d item(s), total %.2f", purchase.id, len(purchase.items), purchase.total_amount)
    return _serialize_purchase(purchase)
