"""
Rate resolver - prices a parcel from a forwarder's rate table.

Key business rules:
1. Destination country -> the forwarder's single active zone containing it
2. (zone, courier, service type) -> active rate; a warehouse-specific rate
   beats the forwarder default
3. Weight slab: min inclusive, max inclusive, no max = unbounded. When two
   slabs share a boundary the one declaring it as its minimum wins
   A weight of zero is priced by the slab starting at 0; negative weights are rejected
4. Base = flat rate, or weight * rate per kg
5. Total = base + handling + insurance + fuel surcharge
6. Consolidated parcels get the forwarder's consolidation discount

Customer-facing search prices every public forwarder-default rate whose zone
covers the destination; a rate with no slab for the weight is left out.

Configuration is re-read on every call.
"""
import logging
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.models import ConsolidationSettings, Forwarder, Order, ShippingRate, ShippingZone, WeightSlab
from app.models.order import ShippingType
from app.models.shipping import ServiceType
from app.schemas.shipping import RateQuoteRequest
from app.services.errors import (
    ConflictError,
    InvalidSlabConfiguration,
    NoRateConfigured,
    NoWeightSlabConfigured,
    NoZoneConfigured,
    OrderNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


def _to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (ArithmeticError, ValueError):
        return None


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS)


@dataclass
class FeeBreakdown:
    weight_charge: Decimal
    handling_fee: Decimal
    insurance_fee: Decimal = Decimal("0.00")
    fuel_surcharge: Decimal = Decimal("0.00")
    discount_percentage: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0.00")


@dataclass
class RateQuote:
    zone_name: str
    courier: str
    service_type: ServiceType
    weight: Decimal
    base_cost: Decimal
    total_cost: Decimal
    weight_slab: str
    estimated_days_min: int
    estimated_days_max: int
    breakdown: FeeBreakdown
    features: Dict[str, bool] = field(default_factory=dict)

    @property
    def estimated_delivery(self) -> str:
        return f"{self.estimated_days_min}-{self.estimated_days_max}"

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["estimated_delivery"] = self.estimated_delivery
        return data


def find_zone(db: Session, forwarder_id: UUID, destination_country: str) -> ShippingZone:
    """Return the forwarder's active zone covering the destination country."""
    country = (destination_country or "").strip().upper()
    zones = (
        db.query(ShippingZone)
        .filter(ShippingZone.forwarder_id == forwarder_id, ShippingZone.is_active.is_(True))
        .all()
    )
    matches = [zone for zone in zones if country in (zone.countries or [])]
    if not matches:
        raise NoZoneConfigured(f"No shipping zone configured for {country or 'unknown country'}")
    if len(matches) > 1:
        names = ", ".join(sorted(zone.name for zone in matches))
        raise ConflictError(f"Country {country} is assigned to multiple active zones: {names}")
    return matches[0]


def find_rate(
    db: Session,
    zone: ShippingZone,
    courier: str,
    service_type: ServiceType,
    warehouse_id: Optional[UUID] = None,
) -> ShippingRate:
    """Return the active rate for (zone, courier, service), preferring a warehouse override."""
    candidates = (
        db.query(ShippingRate)
        .filter(
            ShippingRate.zone_id == zone.id,
            ShippingRate.courier == courier,
            ShippingRate.service_type == service_type,
            ShippingRate.is_active.is_(True),
        )
        .all()
    )
    default_rate = None
    for rate in candidates:
        if warehouse_id is not None and rate.warehouse_id == warehouse_id:
            return rate
        if rate.warehouse_id is None and default_rate is None:
            default_rate = rate
    if default_rate is None:
        raise NoRateConfigured(
            f"No {courier} {ServiceType(service_type).value} rate configured for zone {zone.name}"
        )
    return default_rate


def select_weight_slab(slabs: Iterable[WeightSlab], weight: Decimal) -> WeightSlab:
    """
    Pick the slab whose bounds contain the weight.

    Bounds are inclusive on both ends; among several matches (a weight sitting
    exactly on a shared boundary) the slab with the highest minimum wins.
    """
    selected = None
    for slab in slabs:
        min_weight = _to_decimal(slab.min_weight) or Decimal("0")
        max_weight = _to_decimal(slab.max_weight)
        if weight < min_weight:
            continue
        if max_weight is not None and weight > max_weight:
            continue
        if selected is None or min_weight > (_to_decimal(selected.min_weight) or Decimal("0")):
            selected = slab
    if selected is None:
        raise NoWeightSlabConfigured(f"No weight slab configured for {weight}kg")
    return selected


def compute_base_cost(slab: WeightSlab, weight: Decimal) -> Decimal:
    flat_rate = _to_decimal(slab.flat_rate)
    if flat_rate is not None:
        return _money(flat_rate)
    rate_per_kg = _to_decimal(slab.rate_per_kg)
    if rate_per_kg is not None:
        return _money(weight * rate_per_kg)
    raise InvalidSlabConfiguration(f"Weight slab '{slab.label}' has neither a flat rate nor a per-kg rate")


def apply_consolidation_discount(total: Decimal, discount_percentage: Optional[Decimal]) -> Decimal:
    """Apply a percentage discount, e.g. 20 -> total * 0.8."""
    discount = _to_decimal(discount_percentage)
    if not discount:
        return _money(total)
    return _money(total * (Decimal("1") - discount / HUNDRED))


def _consolidation_discount(db: Session, forwarder_id: UUID) -> Optional[Decimal]:
    settings = (
        db.query(ConsolidationSettings)
        .filter(ConsolidationSettings.forwarder_id == forwarder_id)
        .first()
    )
    if not settings or not settings.is_enabled:
        return None
    return _to_decimal(settings.discount_percentage)


def _features(rate: ShippingRate) -> Dict[str, bool]:
    return {
        "requires_signature": bool(rate.requires_signature),
        "tracking_included": bool(rate.tracking_included),
        "insurance_included": bool(rate.insurance_included),
    }


def resolve_rate(db: Session, request: RateQuoteRequest) -> RateQuote:
    """Resolve zone, rate and weight slab for a request and price it."""
    weight = _to_decimal(request.weight)
    if weight is None:
        raise ValidationError("Weight is required")
    if weight < 0:
        raise ValidationError("Weight cannot be negative")

    zone = find_zone(db, request.forwarder_id, request.destination_country)
    rate = find_rate(db, zone, request.courier, request.service_type, request.warehouse_id)
    slab = select_weight_slab(rate.weight_slabs, weight)

    base_cost = compute_base_cost(slab, weight)
    handling = _money(_to_decimal(rate.handling_fee) or Decimal("0"))
    insurance = _money(_to_decimal(rate.insurance_fee) or Decimal("0"))
    fuel = _money(_to_decimal(rate.fuel_surcharge) or Decimal("0"))
    subtotal = base_cost + handling + insurance + fuel

    breakdown = FeeBreakdown(
        weight_charge=base_cost,
        handling_fee=handling,
        insurance_fee=insurance,
        fuel_surcharge=fuel,
    )

    total = _money(subtotal)
    if request.is_consolidated:
        discount = _consolidation_discount(db, request.forwarder_id)
        if discount:
            total = apply_consolidation_discount(subtotal, discount)
            breakdown.discount_percentage = discount
            breakdown.discount_amount = _money(subtotal - total)

    logger.debug(
        f"Resolved rate forwarder={request.forwarder_id} zone={zone.name} "
        f"courier={rate.courier} slab={slab.label} total={total}"
    )

    return RateQuote(
        zone_name=zone.name,
        courier=rate.courier,
        service_type=ServiceType(rate.service_type),
        weight=weight,
        base_cost=base_cost,
        total_cost=total,
        weight_slab=slab.label,
        estimated_days_min=rate.estimated_days_min,
        estimated_days_max=rate.estimated_days_max,
        breakdown=breakdown,
        features=_features(rate),
    )


def quote_order(db: Session, order_id: UUID, service_type: ServiceType) -> RateQuote:
    """Quote an existing order from its destination, courier and declared weight."""
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise OrderNotFound(f"Order {order_id} not found")

    missing: List[str] = []
    if not order.destination_country:
        missing.append("destination_country")
    if not order.courier:
        missing.append("courier")
    if not order.declared_weight:
        missing.append("declared_weight")
    if missing:
        raise ValidationError(f"Order {order_id} cannot be quoted, missing: {', '.join(missing)}")

    request = RateQuoteRequest(
        forwarder_id=order.forwarder_id,
        destination_country=order.destination_country,
        courier=order.courier,
        service_type=service_type,
        weight=order.declared_weight,
        is_consolidated=order.shipping_type == ShippingType.CONSOLIDATED,
        warehouse_id=order.warehouse_id,
    )
    return resolve_rate(db, request)


@dataclass
class ShippingOption:
    rate_id: UUID
    forwarder_id: UUID
    forwarder_name: str
    zone_name: str
    courier: str
    service_type: ServiceType
    service_name: Optional[str]
    weight_slab: str
    base_cost: Decimal
    total_cost: Decimal
    estimated_days_min: int
    estimated_days_max: int
    breakdown: FeeBreakdown
    features: Dict[str, bool] = field(default_factory=dict)
    display_order: Optional[int] = None

    @property
    def estimated_delivery(self) -> str:
        return f"{self.estimated_days_min}-{self.estimated_days_max}"

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["estimated_delivery"] = self.estimated_delivery
        return data


def search_shipping_options(db: Session, destination_country: str, weight) -> List[ShippingOption]:
    """Price every public rate, across active forwarders, that ships to the country."""
    weight = _to_decimal(weight)
    if weight is None:
        raise ValidationError("Weight is required")
    if weight < 0:
        raise ValidationError("Weight cannot be negative")
    country = (destination_country or "").strip().upper()

    zones = (
        db.query(ShippingZone)
        .join(Forwarder, Forwarder.id == ShippingZone.forwarder_id)
        .filter(ShippingZone.is_active.is_(True), Forwarder.is_active.is_(True))
        .all()
    )
    zones = [zone for zone in zones if country in (zone.countries or [])]
    if not zones:
        return []

    rates = (
        db.query(ShippingRate)
        .filter(
            ShippingRate.zone_id.in_([zone.id for zone in zones]),
            ShippingRate.warehouse_id.is_(None),
            ShippingRate.is_active.is_(True),
            ShippingRate.is_public.is_(True),
        )
        .all()
    )

    options: List[ShippingOption] = []
    for rate in rates:
        try:
            slab = select_weight_slab(rate.weight_slabs, weight)
        except NoWeightSlabConfigured:
            logger.debug(f"Skipping rate {rate.id}: no slab for {weight}kg")
            continue

        base_cost = compute_base_cost(slab, weight)
        handling = _money(_to_decimal(rate.handling_fee) or Decimal("0"))
        insurance = _money(_to_decimal(rate.insurance_fee) or Decimal("0"))
        fuel = _money(_to_decimal(rate.fuel_surcharge) or Decimal("0"))

        options.append(
            ShippingOption(
                rate_id=rate.id,
                forwarder_id=rate.forwarder_id,
                forwarder_name=rate.zone.forwarder.business_name,
                zone_name=rate.zone.name,
                courier=rate.courier,
                service_type=ServiceType(rate.service_type),
                service_name=rate.service_name,
                weight_slab=slab.label,
                base_cost=base_cost,
                total_cost=_money(base_cost + handling + insurance + fuel),
                estimated_days_min=rate.estimated_days_min,
                estimated_days_max=rate.estimated_days_max,
                breakdown=FeeBreakdown(
                    weight_charge=base_cost,
                    handling_fee=handling,
                    insurance_fee=insurance,
                    fuel_surcharge=fuel,
                ),
                features=_features(rate),
                display_order=rate.display_order,
            )
        )

    options.sort(key=lambda o: (o.display_order is None, o.display_order or 0, o.total_cost))
    logger.info(f"Found {len(options)} shipping options to {country} for {weight}kg")
    return options
