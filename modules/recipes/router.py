from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from modules.auth.dependencies import get_current_user
from modules.recipes import schemas, service

router = APIRouter(prefix="/recipes", tags=["recipes"], dependencies=[Depends(get_current_user)])


@router.get("/products/{product_id}", response_model=schemas.CostBreakdown)
def product_cost_endpoint(product_id: int, db: Session = Depends(get_db)):
    return service.product_cost_breakdown(db, product_id)


@router.post("/preview", response_model=schemas.CostBreakdown)
def preview_cost_endpoint(preview_in: schemas.RecipePreviewRequest, db: Session = Depends(get_db)):
    return service.preview_cost(db, preview_in.ingredients)
