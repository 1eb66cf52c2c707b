from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.dependencies import get_app_settings
from core.settings import Settings
from modules.auth.dependencies import get_current_user
from modules.transactions import schemas, service

router = APIRouter(prefix="/transactions", tags=["transactions"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=list[schemas.TransactionRead])
def list_transactions_endpoint(db: Session = Depends(get_db)):
    return service.list_transactions(db)


@router.post("/checkout", response_model=schemas.CheckoutResponse, status_code=status.HTTP_201_CREATED)
def checkout_endpoint(
    checkout_in: schemas.CheckoutRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return service.CheckoutService(settings=settings).checkout(db, checkout_in)


@router.get("/{transaction_id}", response_model=schemas.TransactionRead)
def get_transaction_endpoint(transaction_id: int, db: Session = Depends(get_db)):
    return service.get_transaction(db, transaction_id)
