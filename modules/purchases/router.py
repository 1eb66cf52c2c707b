from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from modules.auth.dependencies import require_admin
from modules.purchases import schemas, service

router = APIRouter(prefix="/purchases", tags=["purchases"], dependencies=[Depends(require_admin)])


@router.get("", response_model=list[schemas.PurchaseRead])
def list_purchases_endpoint(db: Session = Depends(get_db)):
    return service.list_purchases(db)


@router.post("", response_model=schemas.PurchaseRead, status_code=status.HTTP_201_CREATED)
def create_purchase_endpoint(purchase_in: schemas.PurchaseCreate, db: Session = Depends(get_db)):
    return service.receive_purchase(db, purchase_in)
