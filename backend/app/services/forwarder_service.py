"""
Forwarder, warehouse and staff management.
"""
import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from app.models import Forwarder, Staff, Warehouse
from app.schemas.forwarder import ForwarderCreate, WarehouseCreate
from app.schemas.staff import StaffCreate
from app.services.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from app.services.shipping_config import get_forwarder

logger = logging.getLogger(__name__)


def create_forwarder(db: Session, forwarder_data: ForwarderCreate) -> Forwarder:
    name = forwarder_data.business_name.strip()
    if not name:
        raise ValidationError("Business name cannot be empty")
    existing = db.query(Forwarder).filter(Forwarder.business_name == name).first()
    if existing:
        raise ConflictError(f"Forwarder with name '{name}' already exists")
    if forwarder_data.max_parcel_weight is not None and forwarder_data.max_parcel_weight <= 0:
        raise ValidationError("Max parcel weight must be greater than zero")

    forwarder = Forwarder(
        business_name=name,
        contact_email=forwarder_data.contact_email,
        contact_phone=forwarder_data.contact_phone,
        max_parcel_weight=forwarder_data.max_parcel_weight,
        max_parcels_per_month=forwarder_data.max_parcels_per_month,
    )
    db.add(forwarder)
    db.commit()
    db.refresh(forwarder)
    logger.info(f"Created forwarder {forwarder.business_name} ({forwarder.id})")
    return forwarder


def get_warehouse(db: Session, forwarder_id: UUID, warehouse_id: UUID) -> Warehouse:
    warehouse = db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
    if not warehouse:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    if warehouse.forwarder_id != forwarder_id:
        raise UnauthorizedError(f"Warehouse {warehouse_id} does not belong to forwarder {forwarder_id}")
    return warehouse


def create_warehouse(db: Session, forwarder_id: UUID, warehouse_data: WarehouseCreate) -> Warehouse:
    get_forwarder(db, forwarder_id)
    if warehouse_data.max_parcels < 0:
        raise ValidationError("Max parcels cannot be negative")
    warehouse = Warehouse(
        forwarder_id=forwarder_id,
        name=warehouse_data.name.strip(),
        address=warehouse_data.address,
        city=warehouse_data.city,
        country=warehouse_data.country.upper() if warehouse_data.country else None,
        max_parcels=warehouse_data.max_parcels,
    )
    db.add(warehouse)
    db.commit()
    db.refresh(warehouse)
    logger.info(f"Created warehouse {warehouse.name} for forwarder {forwarder_id}")
    return warehouse


def list_warehouses(db: Session, forwarder_id: UUID) -> List[Warehouse]:
    return (
        db.query(Warehouse)
        .filter(Warehouse.forwarder_id == forwarder_id)
        .order_by(Warehouse.name)
        .all()
    )


def _forwarder_warehouses(db: Session, forwarder_id: UUID, warehouse_ids: List[UUID]) -> List[Warehouse]:
    if not warehouse_ids:
        return []
    warehouses = db.query(Warehouse).filter(Warehouse.id.in_(warehouse_ids)).all()
    if len(warehouses) != len(set(warehouse_ids)) or any(w.forwarder_id != forwarder_id for w in warehouses):
        raise UnauthorizedError("One or more warehouses do not belong to this forwarder")
    return warehouses


def create_staff(db: Session, forwarder_id: UUID, staff_data: StaffCreate) -> Staff:
    get_forwarder(db, forwarder_id)
    existing = db.query(Staff).filter(Staff.email == staff_data.email).first()
    if existing:
        raise ConflictError(f"Staff member with email '{staff_data.email}' already exists")

    staff = Staff(
        forwarder_id=forwarder_id,
        name=staff_data.name.strip(),
        email=staff_data.email,
        role=staff_data.role,
        can_update_order_status=staff_data.can_update_order_status,
        can_print_labels=staff_data.can_print_labels,
        can_scan_barcodes=staff_data.can_scan_barcodes,
        can_view_reports=staff_data.can_view_reports,
    )
    staff.warehouses = _forwarder_warehouses(db, forwarder_id, staff_data.warehouse_ids)
    db.add(staff)
    db.commit()
    db.refresh(staff)
    logger.info(f"Created staff {staff.name} ({staff.role.value}) for forwarder {forwarder_id}")
    return staff


def get_staff(db: Session, forwarder_id: UUID, staff_id: UUID) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff:
        raise NotFoundError("Staff member not found")
    if staff.forwarder_id != forwarder_id:
        raise UnauthorizedError(f"Staff member {staff_id} does not belong to forwarder {forwarder_id}")
    return staff


def list_staff(db: Session, forwarder_id: UUID, include_inactive: bool = False) -> List[Staff]:
    query = db.query(Staff).filter(Staff.forwarder_id == forwarder_id)
    if not include_inactive:
        query = query.filter(Staff.is_active.is_(True))
    return query.order_by(Staff.name).all()


def deactivate_staff(db: Session, forwarder_id: UUID, staff_id: UUID) -> Staff:
    staff = get_staff(db, forwarder_id, staff_id)
    staff.is_active = False
    db.commit()
    db.refresh(staff)
    logger.info(f"Deactivated staff {staff_id}")
    return staff
