from typing import List, Dict, Any

from sqlalchemy.orm import Session

from core.errors import ConflictException, NotFoundException
from modules.products import models, schemas
from modules.recipes import service as recipe_service
from modules.transactions import models as transaction_models


def _serialize_product(product: models.Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "category": product.category,
        "price": product.price,
        "cost_price": product.cost_price,
        "manual_cost": product.manual_cost,
        "stock": product.stock,
        "image": product.image,
        "ingredients": [
            {
                "id": ing.id,
                "raw_material_id": ing.raw_material_id,
                "raw_material_name": ing.raw_material.name,
                "unit": ing.raw_material.unit,
                "amount": ing.amount,
            }
            for ing in product.ingredients
        ],
    }


def _get_product_model(db: Session, product_id: int) -> models.Product:
    product = db.query(models.Product).filter(models.Product.id == product_id).first()
    if not product:
        raise NotFoundException("Product not found")
    return product


def _apply_payload(db: Session, product: models.Product, product_in: schemas.ProductCreate) -> None:
    recipe_service.check_unique_materials(product_in.ingredients)
    materials = recipe_service.load_materials(db, (i.raw_material_id for i in product_in.ingredients))

    product.name = product_in.name
    product.category = product_in.category
    product.price = product_in.price
    product.stock = product_in.stock
    product.image = product_in.image
    product.manual_cost = product_in.manual_cost

    # Whole-value replace of the recipe: drop the old rows before inserting the new set
    if product.ingredients:
        product.ingredients = []
        db.flush()
    product.ingredients = [
        models.ProductIngredient(
            raw_material_id=ing.raw_material_id,
            amount=ing.amount,
            raw_material=materials[ing.raw_material_id],
        )
        for ing in product_in.ingredients
    ]

    if product_in.manual_cost:
        product.cost_price = product_in.cost_price
    else:
        unit_costs = {mid: m.unit_cost for mid, m in materials.items()}
        product.cost_price = recipe_service.compute_cost_price(product_in.ingredients, unit_costs)


def create_product(db: Session, product_in: schemas.ProductCreate) -> Dict[str, Any]:
    product = models.Product()
    _apply_payload(db, product, product_in)
    db.add(product)
    db.commit()
    db.refresh(product)
    return _serialize_product(product)


def list_products(db: Session) -> List[Dict[str, Any]]:
    products = db.query(models.Product).order_by(models.Product.id).all()
    return [_serialize_product(p) for p in products]


def get_product(db: Session, product_id: int) -> Dict[str, Any]:
    return _serialize_product(_get_product_model(db, product_id))


def update_product(db: Session, product_id: int, product_in: schemas.ProductUpdate) -> Dict[str, Any]:
    product = _get_product_model(db, product_id)
    _apply_payload(db, product, product_in)
    db.commit()
    db.refresh(product)
    return _serialize_product(product)


def delete_product(db: Session, product_id: int) -> None:
    product = _get_product_model(db, product_id)
    sold = (
        db.query(transaction_models.TransactionItem)
        .filter(transaction_models.TransactionItem.product_id == product.id)
        .first()
    )
    if sold:
        raise ConflictException("Product has sales history and cannot be deleted")
    db.delete(product)
    db.commit()
