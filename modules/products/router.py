from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from modules.auth.dependencies import get_current_user
from modules.products import schemas, service

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=schemas.ProductRead, status_code=status.HTTP_201_CREATED)
def create_product_endpoint(product_in: schemas.ProductCreate, db: Session = Depends(get_db)):
    return service.create_product(db, product_in)


@router.get("", response_model=list[schemas.ProductRead])
def list_products_endpoint(db: Session = Depends(get_db)):
    return service.list_products(db)


@router.get("/{product_id}", response_model=schemas.ProductRead)
def get_product_endpoint(product_id: int, db: Session = Depends(get_db)):
    return service.get_product(db, product_id)


@router.put("/{product_id}", response_model=schemas.ProductRead)
def update_product_endpoint(product_id: int, product_in: schemas.ProductUpdate, db: Session = Depends(get_db)):
    return service.update_product(db, product_id, product_in)


@router.delete("/{product_id}")
def delete_product_endpoint(product_id: int, db: Session = Depends(get_db)):
    service.delete_product(db, product_id)
    return {"message": "Product deleted"}
