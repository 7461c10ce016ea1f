"""
Order creation, listing and audited order actions.

Courier assignment and label printing keep the status unchanged but still
append a history record (previous == new).
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models import ActorType, Customer, Order, OrderStatus, Warehouse
from app.schemas.order import BulkCourierAssign, CourierAssign, OrderCreate, ActorAction
from app.services.errors import NotFoundError, UnauthorizedError, ValidationError
from app.services.shipping_config import COUNTRY_CODE_RE, get_forwarder
from app.services.status_tracker import append_history, get_order, resolve_actor

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


def create_order(db: Session, order_data: OrderCreate) -> Order:
    """Create an order in `incoming` with its "Order created" history record."""
    forwarder = get_forwarder(db, order_data.forwarder_id)
    customer = db.query(Customer).filter(Customer.id == order_data.customer_id).first()
    if not customer:
        raise NotFoundError(f"Customer {order_data.customer_id} not found")
    warehouse = db.query(Warehouse).filter(Warehouse.id == order_data.warehouse_id).first()
    if not warehouse:
        raise NotFoundError(f"Warehouse {order_data.warehouse_id} not found")
    if warehouse.forwarder_id != forwarder.id:
        raise UnauthorizedError(f"Warehouse {warehouse.id} does not belong to forwarder {forwarder.id}")

    if order_data.declared_weight is not None:
        if order_data.declared_weight <= 0:
            raise ValidationError("Declared weight must be greater than zero")
        if forwarder.max_parcel_weight is not None and order_data.declared_weight > forwarder.max_parcel_weight:
            raise ValidationError(
                f"Declared weight {order_data.declared_weight}kg exceeds the forwarder limit of "
                f"{forwarder.max_parcel_weight}kg"
            )
    if order_data.declared_value is not None and order_data.declared_value < 0:
        raise ValidationError("Declared value cannot be negative")

    destination = None
    if order_data.destination_country:
        destination = order_data.destination_country.strip().upper()
        if not COUNTRY_CODE_RE.match(destination):
            raise ValidationError(f"Invalid destination country '{order_data.destination_country}'")

    now = datetime.utcnow()
    order = Order(
        customer_id=customer.id,
        forwarder_id=forwarder.id,
        warehouse_id=warehouse.id,
        customer_name=customer.name,
        customer_email=customer.email,
        shipping_address=order_data.shipping_address,
        destination_country=destination,
        tracking_number=order_data.tracking_number,
        merchant_name=order_data.merchant_name,
        declared_weight=order_data.declared_weight,
        declared_value=order_data.declared_value,
        currency=order_data.currency.upper(),
        shipping_type=order_data.shipping_type,
        status=OrderStatus.INCOMING,
        label_printed=False,
        notes=order_data.notes,
        created_at=now,
        updated_at=now,
    )
    try:
        db.add(order)
        db.flush()
        append_history(
            db,
            order,
            previous_status=None,
            new_status=OrderStatus.INCOMING,
            actor_id=None,
            actor_type=ActorType.SYSTEM,
            notes="Order created",
            changed_at=now,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info(f"Created order {order.id} for customer {customer.id} at warehouse {warehouse.name}")
    return order


def list_forwarder_orders(
    db: Session,
    forwarder_id: UUID,
    status: Optional[OrderStatus] = None,
    warehouse_id: Optional[UUID] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[Order], int]:
    """Newest first. Search matches tracking number, customer or merchant name."""
    if page < 1 or page_size < 1:
        raise ValidationError("page and page_size must be positive")
    page_size = min(page_size, MAX_PAGE_SIZE)

    query = db.query(Order).filter(Order.forwarder_id == forwarder_id)
    if status:
        query = query.filter(Order.status == status)
    if warehouse_id:
        query = query.filter(Order.warehouse_id == warehouse_id)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Order.tracking_number).like(pattern),
                func.lower(Order.customer_name).like(pattern),
                func.lower(Order.merchant_name).like(pattern),
            )
        )

    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return orders, total


def list_customer_orders(db: Session, customer_id: UUID) -> List[Order]:
    return (
        db.query(Order)
        .filter(Order.customer_id == customer_id)
        .order_by(Order.created_at.desc())
        .all()
    )


def assign_courier(db: Session, order_id: UUID, assignment: CourierAssign) -> Order:
    order = get_order(db, order_id)
    staff = resolve_actor(db, order, assignment.actor_id, assignment.actor_type, "can_update_order_status")
    courier = assignment.courier.strip()
    if not courier:
        raise ValidationError("Courier cannot be empty")

    tracking = assignment.courier_tracking_number
    try:
        order.courier = courier
        order.courier_tracking_number = tracking
        order.updated_at = datetime.utcnow()
        append_history(
            db,
            order,
            previous_status=order.status,
            new_status=order.status,
            actor_id=assignment.actor_id,
            actor_type=assignment.actor_type,
            notes=f"Courier assigned: {courier}{f' ({tracking})' if tracking else ''}",
            staff=staff,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info(f"Assigned courier {courier} to order {order_id}")
    return order


def bulk_assign_courier(db: Session, assignment: BulkCourierAssign) -> List[UUID]:
    """Assign one courier to many orders; all or nothing."""
    if not assignment.order_ids:
        raise ValidationError("No orders given")
    courier = assignment.courier.strip()
    if not courier:
        raise ValidationError("Courier cannot be empty")

    updated: List[UUID] = []
    try:
        for order_id in dict.fromkeys(assignment.order_ids):
            order = get_order(db, order_id)
            staff = resolve_actor(db, order, assignment.actor_id, assignment.actor_type, "can_update_order_status")
            order.courier = courier
            order.updated_at = datetime.utcnow()
            append_history(
                db,
                order,
                previous_status=order.status,
                new_status=order.status,
                actor_id=assignment.actor_id,
                actor_type=assignment.actor_type,
                notes=f"Bulk courier assigned: {courier}",
                staff=staff,
            )
            updated.append(order.id)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Bulk assigned courier {courier} to {len(updated)} orders")
    return updated


def mark_label_printed(db: Session, order_id: UUID, action: ActorAction) -> Order:
    order = get_order(db, order_id)
    staff = resolve_actor(db, order, action.actor_id, action.actor_type, "can_print_labels")
    try:
        order.label_printed = True
        order.updated_at = datetime.utcnow()
        append_history(
            db,
            order,
            previous_status=order.status,
            new_status=order.status,
            actor_id=action.actor_id,
            actor_type=action.actor_type,
            notes="Label printed",
            staff=staff,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(order)
    logger.info(f"Label printed for order {order_id}")
    return order
