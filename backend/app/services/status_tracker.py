"""
Order status tracker.

Lifecycle:
    incoming -> arrived_at_warehouse -> packed -> awaiting_pickup -> in_transit -> delivered

Transition policy:
1. Same status is allowed (a re-scan)
2. Forward moves, including skipped stages, are allowed for every actor
3. Backward moves are corrections: forwarders and supervisor/manager staff only
4. Legacy values (received, shipped) are never written; an order still holding
   one is ranked as its canonical synonym

Every call appends exactly one OrderStatusHistory row; staff actions also add a
StaffActivity row. Order patch, history and activity commit together.
Stage timestamps are set once, the first time the order lands on a stage, whichever
direction it came from.
"""
import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from app.models import (
    ActivityType,
    ActorType,
    Order,
    OrderStatus,
    OrderStatusHistory,
    Staff,
    StaffActivity,
    StaffRole,
    Warehouse,
)
from app.schemas.order import ScanRequest, StatusUpdate
from app.services.errors import (
    InvalidStatusTransition,
    OrderNotFound,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

STATUS_PROGRESSION = [
    OrderStatus.INCOMING,
    OrderStatus.ARRIVED_AT_WAREHOUSE,
    OrderStatus.PACKED,
    OrderStatus.AWAITING_PICKUP,
    OrderStatus.IN_TRANSIT,
    OrderStatus.DELIVERED,
]

LEGACY_STATUS_MAP = {
    OrderStatus.RECEIVED: OrderStatus.ARRIVED_AT_WAREHOUSE,
    OrderStatus.SHIPPED: OrderStatus.IN_TRANSIT,
}

# Stage -> order column stamped whenever the order lands on it with the column unset
STAGE_TIMESTAMPS = {
    OrderStatus.ARRIVED_AT_WAREHOUSE: "received_at",
    OrderStatus.PACKED: "packed_at",
    OrderStatus.AWAITING_PICKUP: "awaiting_pickup_at",
    OrderStatus.IN_TRANSIT: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
}

CORRECTION_ROLES = {StaffRole.SUPERVISOR, StaffRole.MANAGER}


def canonical_status(status: OrderStatus) -> OrderStatus:
    status = OrderStatus(status)
    return LEGACY_STATUS_MAP.get(status, status)


def status_rank(status: OrderStatus) -> int:
    return STATUS_PROGRESSION.index(canonical_status(status))


def check_transition(
    current: OrderStatus,
    new: OrderStatus,
    actor_type: ActorType,
    staff_role: Optional[StaffRole] = None,
) -> None:
    """Raise InvalidStatusTransition when the move is not allowed for this actor."""
    new = OrderStatus(new)
    if new in LEGACY_STATUS_MAP:
        raise InvalidStatusTransition(
            f"Status '{new.value}' is no longer used; use '{LEGACY_STATUS_MAP[new].value}'"
        )
    if status_rank(new) >= status_rank(current):
        return

    actor_type = ActorType(actor_type)
    if actor_type == ActorType.FORWARDER:
        return
    if actor_type == ActorType.STAFF and staff_role in CORRECTION_ROLES:
        return
    raise InvalidStatusTransition(
        f"Cannot move order back from {OrderStatus(current).value} to {new.value}; "
        f"only supervisors, managers or the forwarder can correct a status"
    )


def _resolve_staff(db: Session, staff_id: UUID, order: Order, permission: str) -> Staff:
    staff = db.query(Staff).filter(Staff.id == staff_id).first()
    if not staff or not staff.is_active:
        raise UnauthorizedError("Staff member not found or inactive")
    if staff.forwarder_id != order.forwarder_id:
        raise UnauthorizedError("Staff member does not work for this order's forwarder")
    if not getattr(staff, permission):
        raise UnauthorizedError(f"Staff member lacks permission {permission}")
    if order.warehouse_id not in staff.warehouse_ids:
        raise UnauthorizedError("You are not assigned to this warehouse")
    return staff


def resolve_actor(
    db: Session, order: Order, actor_id: Optional[UUID], actor_type: ActorType, permission: str
) -> Optional[Staff]:
    actor_type = ActorType(actor_type)
    if actor_type == ActorType.STAFF:
        return _resolve_staff(db, actor_id, order, permission)
    if actor_type == ActorType.FORWARDER and actor_id != order.forwarder_id:
        raise UnauthorizedError(f"Forwarder {actor_id} does not own order {order.id}")
    return None


def get_order(db: Session, order_id: UUID) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise OrderNotFound(f"Order {order_id} not found")
    return order


def _warehouse_name(db: Session, warehouse_id: Optional[UUID]) -> Optional[str]:
    if warehouse_id is None:
        return None
    warehouse = db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
    return warehouse.name if warehouse else None


def append_history(
    db: Session,
    order: Order,
    previous_status: Optional[OrderStatus],
    new_status: OrderStatus,
    actor_id: Optional[UUID],
    actor_type: ActorType,
    notes: Optional[str] = None,
    scan_data: Optional[Dict] = None,
    staff: Optional[Staff] = None,
    changed_at: Optional[datetime] = None,
) -> OrderStatusHistory:
    """Add one history row to the session. The caller commits."""
    record = OrderStatusHistory(
        order_id=order.id,
        forwarder_id=order.forwarder_id,
        warehouse_id=order.warehouse_id,
        previous_status=previous_status,
        new_status=new_status,
        actor_id=actor_id,
        actor_type=actor_type,
        staff_name=staff.name if staff else None,
        warehouse_name=_warehouse_name(db, order.warehouse_id),
        notes=notes,
        scan_data=scan_data,
        changed_at=changed_at or datetime.utcnow(),
    )
    db.add(record)
    return record


def _record_staff_activity(
    db: Session,
    staff: Staff,
    order: Order,
    activity_type: ActivityType,
    details: Dict,
    now: datetime,
) -> StaffActivity:
    activity = StaffActivity(
        staff_id=staff.id,
        forwarder_id=order.forwarder_id,
        warehouse_id=order.warehouse_id,
        order_id=order.id,
        activity_type=activity_type,
        details=details,
        created_at=now,
    )
    staff.last_active_at = now
    db.add(activity)
    return activity


def update_status(db: Session, order_id: UUID, update: StatusUpdate) -> OrderStatusHistory:
    """Change an order's status and append the matching history record."""
    order = get_order(db, order_id)
    staff = resolve_actor(db, order, update.actor_id, update.actor_type, "can_update_order_status")

    previous = OrderStatus(order.status)
    new = OrderStatus(update.new_status)
    try:
        check_transition(previous, new, update.actor_type, staff.role if staff else None)
    except InvalidStatusTransition:
        logger.warning(
            f"Rejected status change for order {order_id}: {previous.value} -> {new.value} "
            f"by {ActorType(update.actor_type).value} {update.actor_id}"
        )
        raise

    now = datetime.utcnow()
    notes = update.notes or f"Status updated by {ActorType(update.actor_type).value}"
    if status_rank(new) < status_rank(previous):
        role = staff.role.value if staff else ActorType(update.actor_type).value
        correction = f"Status corrected from {previous.value} by {role}"
        notes = f"{notes} ({correction})"

    scan_data = update.scan_data.model_dump() if update.scan_data else None
    try:
        order.status = new
        column = STAGE_TIMESTAMPS.get(new)
        if column and getattr(order, column) is None:
            setattr(order, column, now)
        order.updated_at = now

        record = append_history(
            db,
            order,
            previous_status=previous,
            new_status=new,
            actor_id=update.actor_id,
            actor_type=update.actor_type,
            notes=notes,
            scan_data=scan_data,
            staff=staff,
            changed_at=now,
        )
        if staff:
            _record_staff_activity(
                db,
                staff,
                order,
                ActivityType.SCAN if scan_data else ActivityType.STATUS_UPDATE,
                {
                    "old_status": previous.value,
                    "new_status": new.value,
                    "scan_location": scan_data.get("scan_location") if scan_data else None,
                },
                now,
            )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception(f"Status update for order {order_id} failed; rolled back")
        raise

    db.refresh(record)
    logger.info(
        f"Order {order_id} status {previous.value} -> {new.value} "
        f"by {ActorType(update.actor_type).value} {update.actor_id}"
    )
    return record


def log_scan(db: Session, order_id: UUID, scan: ScanRequest) -> OrderStatusHistory:
    """Record a barcode scan that does not change the status."""
    order = get_order(db, order_id)
    staff = _resolve_staff(db, scan.staff_id, order, "can_scan_barcodes")

    now = datetime.utcnow()
    scan_data = scan.scan_data.model_dump()
    current = OrderStatus(order.status)
    try:
        record = append_history(
            db,
            order,
            previous_status=current,
            new_status=current,
            actor_id=staff.id,
            actor_type=ActorType.STAFF,
            notes=scan.notes or f"Scanned {scan.scan_data.barcode_value}",
            scan_data=scan_data,
            staff=staff,
            changed_at=now,
        )
        _record_staff_activity(
            db,
            staff,
            order,
            ActivityType.SCAN,
            {"old_status": current.value, "new_status": current.value, "scan_location": scan_data.get("scan_location")},
            now,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(record)
    logger.info(f"Staff {staff.id} scanned order {order_id} ({scan.scan_data.barcode_value})")
    return record


def get_order_history(db: Session, order_id: UUID) -> List[OrderStatusHistory]:
    """History of an order, oldest first."""
    get_order(db, order_id)
    return (
        db.query(OrderStatusHistory)
        .filter(OrderStatusHistory.order_id == order_id)
        .order_by(OrderStatusHistory.changed_at, OrderStatusHistory.id)
        .all()
    )


def get_recent_status_updates(
    db: Session,
    forwarder_id: UUID,
    days: int = 7,
    warehouse_id: Optional[UUID] = None,
    staff_id: Optional[UUID] = None,
    limit: int = 50,
) -> List[OrderStatusHistory]:
    since = datetime.utcnow() - timedelta(days=days)
    query = db.query(OrderStatusHistory).filter(
        OrderStatusHistory.forwarder_id == forwarder_id,
        OrderStatusHistory.changed_at >= since,
    )
    if warehouse_id:
        query = query.filter(OrderStatusHistory.warehouse_id == warehouse_id)
    if staff_id:
        query = query.filter(
            OrderStatusHistory.actor_type == ActorType.STAFF,
            OrderStatusHistory.actor_id == staff_id,
        )
    return query.order_by(OrderStatusHistory.changed_at.desc()).limit(limit).all()


def get_status_update_stats(db: Session, forwarder_id: UUID, days: int = 7) -> Dict:
    since = datetime.utcnow() - timedelta(days=days)
    records = (
        db.query(OrderStatusHistory)
        .filter(
            OrderStatusHistory.forwarder_id == forwarder_id,
            OrderStatusHistory.changed_at >= since,
        )
        .all()
    )
    by_actor = Counter(ActorType(r.actor_type).value for r in records)
    by_status = Counter(OrderStatus(r.new_status).value for r in records)
    by_staff = Counter(r.staff_name for r in records if r.staff_name)
    return {
        "days": days,
        "total_updates": len(records),
        "by_actor_type": dict(by_actor),
        "by_status": dict(by_status),
        "by_staff": dict(by_staff),
    }


def normalize_legacy_statuses(db: Session) -> Dict[str, int]:
    """
    Rewrite legacy status values to their canonical synonyms.

    Covers orders and history rows. Safe to run repeatedly.
    """
    counts: Dict[str, int] = {}
    targets: List[Tuple[str, type, object]] = [
        ("orders", Order, Order.status),
        ("history_previous", OrderStatusHistory, OrderStatusHistory.previous_status),
        ("history_new", OrderStatusHistory, OrderStatusHistory.new_status),
    ]
    try:
        for label, model, column in targets:
            total = 0
            for legacy, canonical in LEGACY_STATUS_MAP.items():
                total += (
                    db.query(model)
                    .filter(column == legacy)
                    .update({column: canonical}, synchronize_session=False)
                )
            counts[label] = total
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(f"Normalized legacy statuses: {counts}")
    return counts
