from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from modules.auth.dependencies import require_admin
from modules.raw_materials import schemas, service

router = APIRouter(prefix="/raw-materials", tags=["raw_materials"], dependencies=[Depends(require_admin)])


@router.post("", response_model=schemas.RawMaterialRead, status_code=status.HTTP_201_CREATED)
def create_raw_material_endpoint(material_in: schemas.RawMaterialCreate, db: Session = Depends(get_db)):
    return service.create_raw_material(db, material_in)


@router.get("", response_model=list[schemas.RawMaterialRead])
def list_raw_materials_endpoint(db: Session = Depends(get_db)):
    return service.list_raw_materials(db)


@router.get("/{raw_material_id}", response_model=schemas.RawMaterialRead)
def get_raw_material_endpoint(raw_material_id: int, db: Session = Depends(get_db)):
    return service.get_raw_material(db, raw_material_id)


@router.put("/{raw_material_id}", response_model=schemas.RawMaterialRead)
def update_raw_material_endpoint(
    raw_material_id: int, material_in: schemas.RawMaterialUpdate, db: Session = Depends(get_db)
):
    return service.update_raw_material(db, raw_material_id, material_in)


@router.delete("/{raw_material_id}")
def delete_raw_material_endpoint(raw_material_id: int, db: Session = Depends(get_db)):
    service.delete_raw_material(db, raw_material_id)
    return {"message": "Raw material deleted"}
