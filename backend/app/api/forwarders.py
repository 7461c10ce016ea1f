"""
Forwarder, warehouse, staff and consolidation settings API endpoints.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from app.db.database import get_db
from app.models import Forwarder
from app.schemas.forwarder import (
    ForwarderCreate,
    ForwarderResponse,
    WarehouseCreate,
    WarehouseResponse,
    ConsolidationSettingsUpdate,
    ConsolidationSettingsResponse,
)
from app.schemas.staff import StaffCreate, StaffResponse
from app.services import forwarder_service, shipping_config

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=ForwarderResponse, status_code=status.HTTP_201_CREATED)
async def create_forwarder(
    forwarder_data: ForwarderCreate,
    db: Session = Depends(get_db)
):
    """Register a new forwarder."""
    return forwarder_service.create_forwarder(db, forwarder_data)


@router.get("/", response_model=List[ForwarderResponse])
async def list_forwarders(
    db: Session = Depends(get_db)
):
    """List all forwarders."""
    return db.query(Forwarder).order_by(Forwarder.business_name).all()


@router.get("/{forwarder_id}", response_model=ForwarderResponse)
async def get_forwarder(
    forwarder_id: UUID,
    db: Session = Depends(get_db)
):
    """Get a specific forwarder."""
    forwarder = db.query(Forwarder).filter(Forwarder.id == forwarder_id).first()
    if not forwarder:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Forwarder {forwarder_id} not found"
        )
    return forwarder


@router.post("/{forwarder_id}/warehouses", response_model=WarehouseResponse, status_code=status.HTTP_201_CREATED)
async def create_warehouse(
    forwarder_id: UUID,
    warehouse_data: WarehouseCreate,
    db: Session = Depends(get_db)
):
    return forwarder_service.create_warehouse(db, forwarder_id, warehouse_data)


@router.get("/{forwarder_id}/warehouses", response_model=List[WarehouseResponse])
async def list_warehouses(
    forwarder_id: UUID,
    db: Session = Depends(get_db)
):
    return forwarder_service.list_warehouses(db, forwarder_id)


@router.get("/{forwarder_id}/consolidation", response_model=ConsolidationSettingsResponse)
async def get_consolidation_settings(
    forwarder_id: UUID,
    db: Session = Depends(get_db)
):
    consolidation = shipping_config.get_consolidation_settings(db, forwarder_id)
    if not consolidation:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No consolidation settings for forwarder {forwarder_id}"
        )
    return consolidation


@router.put("/{forwarder_id}/consolidation", response_model=ConsolidationSettingsResponse)
async def upsert_consolidation_settings(
    forwarder_id: UUID,
    settings_data: ConsolidationSettingsUpdate,
    db: Session = Depends(get_db)
):
    """Create or replace consolidated shipping settings."""
    return shipping_config.upsert_consolidation_settings(db, forwarder_id, settings_data)


@router.post("/{forwarder_id}/staff", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
async def create_staff(
    forwarder_id: UUID,
    staff_data: StaffCreate,
    db: Session = Depends(get_db)
):
    return forwarder_service.create_staff(db, forwarder_id, staff_data)


@router.get("/{forwarder_id}/staff", response_model=List[StaffResponse])
async def list_staff(
    forwarder_id: UUID,
    include_inactive: bool = False,
    db: Session = Depends(get_db)
):
    return forwarder_service.list_staff(db, forwarder_id, include_inactive=include_inactive)


@router.delete("/{forwarder_id}/staff/{staff_id}", response_model=StaffResponse)
async def deactivate_staff(
    forwarder_id: UUID,
    staff_id: UUID,
    db: Session = Depends(get_db)
):
    """Deactivate a staff member. Their history stays attached to the orders they touched."""
    logger.info(f"Deactivating staff {staff_id} for forwarder {forwarder_id}")
    return forwarder_service.deactivate_staff(db, forwarder_id, staff_id)
