"""Recipe cost rollup between products and raw materials."""

from typing import Any, Dict, Iterable, List, Mapping

from sqlalchemy.orm import Session

from core.errors import NotFoundException, ValidationAppException
from modules.products import models as product_models
from modules.raw_materials import models as raw_material_models


def compute_cost_price(ingredients: Iterable[Any], unit_costs: Mapping[int, float]) -> float:
    """Return sum(unit_cost * amount) over a recipe.

    ``ingredients`` are objects exposing ``raw_material_id`` and ``amount``
    (request schemas or stored rows); ``unit_costs`` maps raw material id to
    its current unit cost. The sum is kept at full precision; rounding to
    currency happens only when it is rendered.
    """
    total = 0.0
    for ingredient in ingredients:
        try:
            unit_cost = unit_costs[ingredient.raw_material_id]
        except KeyError:
            raise NotFoundException(f"Raw material {ingredient.raw_material_id} not found") from None
        total += unit_cost * ingredient.amount
    return total


def check_unique_materials(ingredients: Iterable[Any]) -> None:
    seen = set()
    for ingredient in ingredients:
        if ingredient.raw_material_id in seen:
            raise ValidationAppException(f"Raw material {ingredient.raw_material_id} is listed more than once")
        seen.add(ingredient.raw_material_id)


def load_materials(db: Session, material_ids: Iterable[int]) -> Dict[int, raw_material_models.RawMaterial]:
    ids = set(material_ids)
    if not ids:
        return {}
    rows = db.query(raw_material_models.RawMaterial).filter(raw_material_models.RawMaterial.id.in_(ids)).all()
    materials = {m.id: m for m in rows}
    missing = sorted(ids - materials.keys())
    if missing:
        raise NotFoundException(f"Raw material {missing[0]} not found")
    return materials


def build_cost_breakdown(
    ingredients: Iterable[Any],
    materials: Mapping[int, raw_material_models.RawMaterial],
    product_id: int = None,
) -> Dict[str, Any]:
    lines: List[Dict[str, Any]] = []
    for ingredient in ingredients:
        material = materials.get(ingredient.raw_material_id)
        if material is None:
            raise NotFoundException(f"Raw material {ingredient.raw_material_id} not found")
        lines.append(
            {
                "raw_material_id": material.id,
                "name": material.name,
                "unit": material.unit,
                "amount": ingredient.amount,
                "unit_cost": material.unit_cost,
                "line_cost": material.unit_cost * ingredient.amount,
            }
        )

    total_cost = sum(line["line_cost"] for line in lines)
    for line in lines:
        line["cost_share_pct"] = (line["line_cost"] / total_cost * 100) if total_cost > 0 else 0.0

    # Highest impact first
    lines.sort(key=lambda x: x["line_cost"], reverse=True)

    return {
        "product_id": product_id,
        "ingredient_count": len(lines),
        "total_cost": total_cost,
        "items": lines,
    }


def preview_cost(db: Session, ingredients: List[Any]) -> Dict[str, Any]:
    check_unique_materials(ingredients)
    materials = load_materials(db, (i.raw_material_id for i in ingredients))
    return build_cost_breakdown(ingredients, materials)


def product_cost_breakdown(db: Session, product_id: int) -> Dict[str, Any]:
    product = db.query(product_models.Product).filter(product_models.Product.id == product_id).first()
    if not product:
        raise NotFoundException("Product not found")
    materials = {i.raw_material_id: i.raw_material for i in product.ingredients}
    return build_cost_breakdown(product.ingredients, materials, product_id=product.id)


def refresh_product_costs(db: Session, raw_material_id: int) -> List[int]:
    """Recompute derived cost prices for products whose recipe uses the material.

    Products with ``manual_cost`` keep their stored value. Changes are left
    pending on the session for the caller to commit.
    """
    products = (
        db.query(product_models.Product)
        .join(product_models.ProductIngredient)
        .filter(product_models.ProductIngredient.raw_material_id == raw_material_id)
        .filter(product_models.Product.manual_cost.is_(False))
        .all()
    )
    updated = []
    for product in products:
        unit_costs = {i.raw_material_id: i.raw_material.unit_cost for i in product.ingredients}
        product.cost_price = compute_cost_price(product.ingredients, unit_costs)
        updated.append(product.id)
    return updated
