import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from core.errors import ConflictException, NotFoundException
from modules.products import models as product_models
from modules.purchases import models as purchase_models
from modules.raw_materials import models, schemas
from modules.recipes import service as recipe_service

logger = logging.getLogger(__name__)


def _serialize_raw_material(material: models.RawMaterial) -> Dict[str, Any]:
    return {
        "id": material.id,
        "name": material.name,
        "unit": material.unit,
        "stock": material.stock,
        "unit_cost": material.unit_cost,
        "supplier": material.supplier,
    }


def _get_raw_material_model(db: Session, raw_material_id: int) -> models.RawMaterial:
    material = db.query(models.RawMaterial).filter(models.RawMaterial.id == raw_material_id).first()
    if not material:
        raise NotFoundException("Raw material not found")
    return material


def create_raw_material(db: Session, material_in: schemas.RawMaterialCreate) -> Dict[str, Any]:
    material = models.RawMaterial(**material_in.model_dump())
    db.add(material)
    db.commit()
    db.refresh(material)
    return _serialize_raw_material(material)


def list_raw_materials(db: Session) -> List[Dict[str, Any]]:
    materials = db.query(models.RawMaterial).order_by(models.RawMaterial.id).all()
    return [_serialize_raw_material(m) for m in materials]


def get_raw_material(db: Session, raw_material_id: int) -> Dict[str, Any]:
    return _serialize_raw_material(_get_raw_material_model(db, raw_material_id))


def update_raw_material(db: Session, raw_material_id: int, material_in: schemas.RawMaterialUpdate) -> Dict[str, Any]:
    material = _get_raw_material_model(db, raw_material_id)
    cost_changed = material.unit_cost != material_in.unit_cost

    for field, value in material_in.model_dump().items():
        setattr(material, field, value)

    if cost_changed:
        db.flush()
        updated = recipe_service.refresh_product_costs(db, material.id)
        if updated:
            logger.info("Unit cost of raw material %s changed; refreshed products %s", material.id, updated)

    db.commit()
    db.refresh(material)
    return _serialize_raw_material(material)


def delete_raw_material(db: Session, raw_material_id: int) -> None:
    material = _get_raw_material_model(db, raw_material_id)
    in_recipe = (
        db.query(product_models.ProductIngredient)
        .filter(product_models.ProductIngredient.raw_material_id == material.id)
        .first()
    )
    if in_recipe:
        raise ConflictException("Raw material is used in a product recipe")
    purchased = (
        db.query(purchase_models.PurchaseItem)
        .filter(purchase_models.PurchaseItem.raw_material_id == material.id)
        .first()
    )
    if purchased:
        raise ConflictException("Raw material is referenced by purchase history")
    db.delete(material)
    db.commit()
