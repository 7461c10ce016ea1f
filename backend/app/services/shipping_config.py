"""
Shipping zone, rate and consolidation configuration.

Write-time rules:
- zone names are unique per forwarder (case-insensitive)
- a country belongs to at most one active zone per forwarder
- weight slabs are non-empty, sorted, contiguous and non-overlapping, each
  with exactly one of flat rate / per-kg rate; only the last may be unbounded
- consolidation holding period is at least MIN_HOLDING_PERIOD_DAYS
- a warehouse gets its own copy of a default rate only where it has no active override
"""
import logging
import re
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config.zone_presets import get_country_codes_for_zone
from app.db.database import settings
from app.models import (
    ConsolidationSettings,
    Forwarder,
    ShippingRate,
    ShippingZone,
    Warehouse,
    WeightSlab,
)
from app.models.shipping import ServiceType
from app.schemas.forwarder import ConsolidationSettingsUpdate
from app.schemas.shipping import (
    ShippingRateCreate,
    ShippingRateUpdate,
    ShippingZoneCreate,
    ShippingZoneUpdate,
    WeightSlabIn,
)
from app.services.errors import (
    ConflictError,
    InvalidSlabConfiguration,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

COUNTRY_CODE_RE = re.compile(r"^[A-Z]{2}$")


def get_forwarder(db: Session, forwarder_id: UUID) -> Forwarder:
    forwarder = db.query(Forwarder).filter(Forwarder.id == forwarder_id).first()
    if not forwarder:
        raise NotFoundError(f"Forwarder {forwarder_id} not found")
    return forwarder


# ---------------------------------------------------------------------------
# Zones
# ---------------------------------------------------------------------------

def normalize_countries(countries: List[str]) -> List[str]:
    """Upper-case, de-duplicate and validate ISO alpha-2 codes, keeping order."""
    normalized: List[str] = []
    for raw in countries or []:
        code = (raw or "").strip().upper()
        if not COUNTRY_CODE_RE.match(code):
            raise ValidationError(f"Invalid country code '{raw}'")
        if code not in normalized:
            normalized.append(code)
    if not normalized:
        raise ValidationError("A zone needs at least one country")
    return normalized


def get_zone(db: Session, forwarder_id: UUID, zone_id: UUID) -> ShippingZone:
    zone = db.query(ShippingZone).filter(ShippingZone.id == zone_id).first()
    if not zone:
        raise NotFoundError(f"Shipping zone {zone_id} not found")
    if zone.forwarder_id != forwarder_id:
        raise UnauthorizedError(f"Shipping zone {zone_id} does not belong to forwarder {forwarder_id}")
    return zone


def list_zones(db: Session, forwarder_id: UUID, active_only: bool = False) -> List[ShippingZone]:
    query = db.query(ShippingZone).filter(ShippingZone.forwarder_id == forwarder_id)
    if active_only:
        query = query.filter(ShippingZone.is_active.is_(True))
    return query.order_by(ShippingZone.name).all()


def _check_zone_conflicts(
    db: Session,
    forwarder_id: UUID,
    name: str,
    countries: List[str],
    is_active: bool,
    zone_id: Optional[UUID] = None,
) -> None:
    others = [
        zone
        for zone in db.query(ShippingZone).filter(ShippingZone.forwarder_id == forwarder_id).all()
        if zone.id != zone_id
    ]

    if any(zone.name.lower() == name.lower() for zone in others):
        raise ConflictError(f'A zone named "{name}" already exists.')

    if not is_active:
        return

    conflicting_countries: List[str] = []
    conflicting_zones: List[str] = []
    for country in countries:
        for zone in others:
            if not zone.is_active or country not in (zone.countries or []):
                continue
            if country not in conflicting_countries:
                conflicting_countries.append(country)
            if zone.name not in conflicting_zones:
                conflicting_zones.append(zone.name)

    if conflicting_countries:
        raise ConflictError(
            f"Country conflict detected! Countries {', '.join(conflicting_countries)} "
            f"requested for zone {name} are already assigned to zones: {', '.join(conflicting_zones)}"
        )


def create_zone(db: Session, forwarder_id: UUID, zone_data: ShippingZoneCreate) -> ShippingZone:
    get_forwarder(db, forwarder_id)
    name = (zone_data.name or "").strip()
    if not name:
        raise ValidationError("Zone name cannot be empty")
    countries = normalize_countries(zone_data.countries)

    _check_zone_conflicts(db, forwarder_id, name, countries, zone_data.is_active)

    zone = ShippingZone(
        forwarder_id=forwarder_id,
        name=name,
        countries=countries,
        is_active=zone_data.is_active,
    )
    db.add(zone)
    db.commit()
    db.refresh(zone)
    logger.info(f"Created shipping zone {zone.name} ({len(countries)} countries) for forwarder {forwarder_id}")
    return zone


def create_zone_from_preset(
    db: Session,
    forwarder_id: UUID,
    continent: str,
    region: Optional[str] = None,
    name: Optional[str] = None,
) -> ShippingZone:
    """Create a zone from the continent/region presets."""
    countries = get_country_codes_for_zone(continent, region)
    if not countries:
        raise NotFoundError(f"No preset zone for {continent}{' / ' + region if region else ''}")
    zone_name = name or region or continent
    return create_zone(db, forwarder_id, ShippingZoneCreate(name=zone_name, countries=countries))


def update_zone(
    db: Session, forwarder_id: UUID, zone_id: UUID, zone_data: ShippingZoneUpdate
) -> ShippingZone:
    zone = get_zone(db, forwarder_id, zone_id)

    name = zone.name
    if zone_data.name is not None:
        name = zone_data.name.strip()
        if not name:
            raise ValidationError("Zone name cannot be empty")
    countries = normalize_countries(zone_data.countries) if zone_data.countries is not None else list(zone.countries or [])
    is_active = zone_data.is_active if zone_data.is_active is not None else zone.is_active

    _check_zone_conflicts(db, forwarder_id, name, countries, is_active, zone_id=zone.id)

    zone.name = name
    zone.countries = countries
    zone.is_active = is_active
    db.commit()
    db.refresh(zone)
    logger.info(f"Updated shipping zone {zone.id} ({zone.name})")
    return zone


def delete_zone(db: Session, forwarder_id: UUID, zone_id: UUID) -> int:
    """Deactivate and detach the zone's rates, then delete it. Returns the number of rates deactivated."""
    zone = get_zone(db, forwarder_id, zone_id)
    rates = db.query(ShippingRate).filter(ShippingRate.zone_id == zone.id).all()
    for rate in rates:
        rate.is_active = False
        rate.zone_id = None
    db.delete(zone)
    db.commit()
    logger.info(f"Deleted shipping zone {zone_id}; deactivated {len(rates)} rates")
    return len(rates)


def list_available_countries(db: Session) -> List[str]:
    """Countries covered by at least one active zone of an active forwarder, sorted."""
    zones = (
        db.query(ShippingZone)
        .join(Forwarder, Forwarder.id == ShippingZone.forwarder_id)
        .filter(ShippingZone.is_active.is_(True), Forwarder.is_active.is_(True))
        .all()
    )
    countries = set()
    for zone in zones:
        countries.update(zone.countries or [])
    return sorted(countries)


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------

def validate_weight_slabs(slabs: List[WeightSlabIn]) -> List[WeightSlabIn]:
    """
    Validate a rate's weight slabs and return them sorted by minimum weight.

    Adjacent slabs share their boundary (previous max == next min); the
    resolver gives that weight to the slab declaring it as its minimum.
    """
    if not slabs:
        raise InvalidSlabConfiguration("At least one weight slab is required")

    for slab in slabs:
        has_flat = slab.flat_rate is not None
        has_per_kg = slab.rate_per_kg is not None
        if has_flat == has_per_kg:
            raise InvalidSlabConfiguration(
                f"Weight slab '{slab.label}' must have exactly one of flat_rate or rate_per_kg"
            )
        if (slab.flat_rate is not None and slab.flat_rate < 0) or (
            slab.rate_per_kg is not None and slab.rate_per_kg < 0
        ):
            raise InvalidSlabConfiguration(f"Weight slab '{slab.label}' has a negative rate")
        if slab.min_weight < 0:
            raise InvalidSlabConfiguration(f"Weight slab '{slab.label}' has a negative minimum weight")
        if slab.max_weight is not None and slab.max_weight <= slab.min_weight:
            raise InvalidSlabConfiguration(
                f"Weight slab '{slab.label}' has max weight {slab.max_weight} not above min weight {slab.min_weight}"
            )

    ordered = sorted(slabs, key=lambda s: s.min_weight)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.max_weight is None:
            raise InvalidSlabConfiguration(
                f"Only the last weight slab may be unbounded ('{previous.label}' is followed by '{current.label}')"
            )
        if current.min_weight < previous.max_weight:
            raise InvalidSlabConfiguration(f"Weight slabs '{previous.label}' and '{current.label}' overlap")
        if current.min_weight > previous.max_weight:
            raise InvalidSlabConfiguration(
                f"Gap between weight slabs '{previous.label}' and '{current.label}' "
                f"({previous.max_weight}kg to {current.min_weight}kg)"
            )
    return ordered


def _build_slabs(slabs: List[WeightSlabIn]) -> List[WeightSlab]:
    return [
        WeightSlab(
            min_weight=slab.min_weight,
            max_weight=slab.max_weight,
            rate_per_kg=slab.rate_per_kg,
            flat_rate=slab.flat_rate,
            label=slab.label.strip(),
        )
        for slab in validate_weight_slabs(slabs)
    ]


def _validate_transit_days(days_min: int, days_max: int) -> None:
    if days_min < 0 or days_max < days_min:
        raise ValidationError(
            f"Invalid transit window {days_min}-{days_max} days"
        )


def _check_warehouse(db: Session, forwarder_id: UUID, warehouse_id: Optional[UUID]) -> None:
    if warehouse_id is None:
        return
    warehouse = db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
    if not warehouse:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    if warehouse.forwarder_id != forwarder_id:
        raise UnauthorizedError(f"Warehouse {warehouse_id} does not belong to forwarder {forwarder_id}")


def _check_duplicate_rate(
    db: Session,
    zone_id: Optional[UUID],
    courier: str,
    service_type: ServiceType,
    warehouse_id: Optional[UUID],
    exclude_id: Optional[UUID] = None,
) -> None:
    """One active rate per (zone, courier, service, warehouse)."""
    if zone_id is None:
        return
    query = db.query(ShippingRate).filter(
        ShippingRate.zone_id == zone_id,
        ShippingRate.courier == courier,
        ShippingRate.service_type == service_type,
        ShippingRate.is_active.is_(True),
    )
    if warehouse_id is None:
        query = query.filter(ShippingRate.warehouse_id.is_(None))
    else:
        query = query.filter(ShippingRate.warehouse_id == warehouse_id)
    for existing in query.all():
        if existing.id != exclude_id:
            raise ConflictError(
                f"An active {courier} {ServiceType(service_type).value} rate already exists for this zone"
            )


def get_rate(db: Session, forwarder_id: UUID, rate_id: UUID) -> ShippingRate:
    rate = db.query(ShippingRate).filter(ShippingRate.id == rate_id).first()
    if not rate:
        raise NotFoundError(f"Shipping rate {rate_id} not found")
    if rate.forwarder_id != forwarder_id:
        raise UnauthorizedError(f"Shipping rate {rate_id} does not belong to forwarder {forwarder_id}")
    return rate


def list_rates(
    db: Session, forwarder_id: UUID, zone_id: Optional[UUID] = None, public_only: bool = False
) -> List[ShippingRate]:
    query = db.query(ShippingRate).filter(ShippingRate.forwarder_id == forwarder_id)
    if zone_id:
        query = query.filter(ShippingRate.zone_id == zone_id)
    if public_only:
        query = query.filter(ShippingRate.is_public.is_(True), ShippingRate.is_active.is_(True))
    rates = query.all()
    return sorted(rates, key=lambda r: (r.display_order is None, r.display_order or 0, r.courier))


def create_rate(db: Session, forwarder_id: UUID, rate_data: ShippingRateCreate) -> ShippingRate:
    zone = get_zone(db, forwarder_id, rate_data.zone_id)
    _check_warehouse(db, forwarder_id, rate_data.warehouse_id)
    _validate_transit_days(rate_data.estimated_days_min, rate_data.estimated_days_max)
    courier = rate_data.courier.strip()
    if not courier:
        raise ValidationError("Courier cannot be empty")
    slabs = _build_slabs(rate_data.weight_slabs)
    if rate_data.is_active:
        _check_duplicate_rate(db, zone.id, courier, rate_data.service_type, rate_data.warehouse_id)

    rate = ShippingRate(
        forwarder_id=forwarder_id,
        zone_id=zone.id,
        warehouse_id=rate_data.warehouse_id,
        courier=courier,
        service_type=rate_data.service_type,
        service_name=rate_data.service_name,
        service_description=rate_data.service_description,
        handling_fee=rate_data.handling_fee,
        insurance_fee=rate_data.insurance_fee,
        fuel_surcharge=rate_data.fuel_surcharge,
        estimated_days_min=rate_data.estimated_days_min,
        estimated_days_max=rate_data.estimated_days_max,
        requires_signature=rate_data.requires_signature,
        tracking_included=rate_data.tracking_included,
        insurance_included=rate_data.insurance_included,
        is_active=rate_data.is_active,
        is_public=rate_data.is_public,
        display_order=rate_data.display_order,
    )
    rate.weight_slabs = slabs

    db.add(rate)
    db.commit()
    db.refresh(rate)
    logger.info(
        f"Created {rate.courier} {rate_data.service_type.value} rate for zone {zone.name} "
        f"with {len(rate.weight_slabs)} weight slabs"
    )
    return rate


def update_rate(
    db: Session, forwarder_id: UUID, rate_id: UUID, rate_data: ShippingRateUpdate
) -> ShippingRate:
    rate = get_rate(db, forwarder_id, rate_id)
    changes = rate_data.model_dump(exclude_unset=True)
    changes.pop("weight_slabs", None)
    # Validate everything before touching the row
    slabs = _build_slabs(rate_data.weight_slabs) if rate_data.weight_slabs is not None else None

    for key in ("courier", "service_type", "estimated_days_min", "estimated_days_max", "is_active"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")
    if "courier" in changes:
        changes["courier"] = changes["courier"].strip()
        if not changes["courier"]:
            raise ValidationError("Courier cannot be empty")
    if "handling_fee" in changes and changes["handling_fee"] is None:
        changes["handling_fee"] = Decimal("0")

    _validate_transit_days(
        changes.get("estimated_days_min", rate.estimated_days_min),
        changes.get("estimated_days_max", rate.estimated_days_max),
    )
    if changes.get("is_active", rate.is_active):
        _check_duplicate_rate(
            db,
            rate.zone_id,
            changes.get("courier", rate.courier),
            changes.get("service_type", rate.service_type),
            rate.warehouse_id,
            exclude_id=rate.id,
        )

    if slabs is not None:
        rate.weight_slabs = slabs
    for key, value in changes.items():
        setattr(rate, key, value)

    db.commit()
    db.refresh(rate)
    logger.info(f"Updated shipping rate {rate.id}: {sorted(rate_data.model_dump(exclude_unset=True).keys())}")
    return rate


def delete_rate(db: Session, forwarder_id: UUID, rate_id: UUID) -> None:
    rate = get_rate(db, forwarder_id, rate_id)
    db.delete(rate)
    db.commit()
    logger.info(f"Deleted shipping rate {rate_id}")


def get_hierarchical_rates(db: Session, forwarder_id: UUID) -> Dict[str, Dict[str, Dict[str, ShippingRate]]]:
    """Organize the forwarder's rates as zone name -> courier -> service type -> rate."""
    organized: Dict[str, Dict[str, Dict[str, ShippingRate]]] = {}
    zones = {zone.id: zone for zone in list_zones(db, forwarder_id)}
    for zone in zones.values():
        organized[zone.name] = {}

    for rate in db.query(ShippingRate).filter(ShippingRate.forwarder_id == forwarder_id).all():
        zone = zones.get(rate.zone_id)
        if zone is None:
            continue
        service = ServiceType(rate.service_type).value
        organized[zone.name].setdefault(rate.courier, {})[service] = rate
    return organized


def copy_default_rates_to_warehouse(
    db: Session, forwarder_id: UUID, warehouse_id: UUID, rate_ids: Optional[List[UUID]] = None
) -> List[ShippingRate]:
    """
    Copy forwarder-default rates, slabs included, into active overrides for one warehouse.

    With no rate_ids every active default rate is copied. Nothing is written if any
    copy would clash with an existing active override.
    """
    _check_warehouse(db, forwarder_id, warehouse_id)

    if rate_ids is None:
        sources = (
            db.query(ShippingRate)
            .filter(
                ShippingRate.forwarder_id == forwarder_id,
                ShippingRate.warehouse_id.is_(None),
                ShippingRate.zone_id.isnot(None),
                ShippingRate.is_active.is_(True),
            )
            .all()
        )
    else:
        sources = [get_rate(db, forwarder_id, rate_id) for rate_id in dict.fromkeys(rate_ids)]

    seen = set()
    copies: List[ShippingRate] = []
    for source in sources:
        if source.warehouse_id is not None:
            raise ValidationError(f"Shipping rate {source.id} is not a forwarder default rate")
        if source.zone_id is None:
            raise ValidationError(f"Shipping rate {source.id} is not attached to a zone")
        key = (source.zone_id, source.courier, ServiceType(source.service_type))
        if key in seen:
            raise ConflictError(
                f"More than one {source.courier} {key[2].value} rate selected for the same zone"
            )
        seen.add(key)
        _check_duplicate_rate(db, source.zone_id, source.courier, source.service_type, warehouse_id)

        copy = ShippingRate(
            forwarder_id=forwarder_id,
            zone_id=source.zone_id,
            warehouse_id=warehouse_id,
            courier=source.courier,
            service_type=source.service_type,
            service_name=source.service_name,
            service_description=source.service_description,
            handling_fee=source.handling_fee,
            insurance_fee=source.insurance_fee,
            fuel_surcharge=source.fuel_surcharge,
            estimated_days_min=source.estimated_days_min,
            estimated_days_max=source.estimated_days_max,
            requires_signature=source.requires_signature,
            tracking_included=source.tracking_included,
            insurance_included=source.insurance_included,
            is_active=True,
            is_public=source.is_public,
            display_order=source.display_order,
        )
        copy.weight_slabs = [
            WeightSlab(
                min_weight=slab.min_weight,
                max_weight=slab.max_weight,
                rate_per_kg=slab.rate_per_kg,
                flat_rate=slab.flat_rate,
                label=slab.label,
            )
            for slab in source.weight_slabs
        ]
        copies.append(copy)

    db.add_all(copies)
    db.commit()
    for copy in copies:
        db.refresh(copy)
    logger.info(f"Copied {len(copies)} default rates to warehouse {warehouse_id}")
    return copies


# ---------------------------------------------------------------------------
# Consolidation
# ---------------------------------------------------------------------------

def get_consolidation_settings(db: Session, forwarder_id: UUID) -> Optional[ConsolidationSettings]:
    return (
        db.query(ConsolidationSettings)
        .filter(ConsolidationSettings.forwarder_id == forwarder_id)
        .first()
    )


def upsert_consolidation_settings(
    db: Session, forwarder_id: UUID, settings_data: ConsolidationSettingsUpdate
) -> ConsolidationSettings:
    get_forwarder(db, forwarder_id)

    minimum_days = settings.min_holding_period_days
    if settings_data.holding_period_days < minimum_days:
        raise ValidationError(f"Holding period must be at least {minimum_days} days")
    discount = settings_data.discount_percentage
    if discount is not None and not (Decimal("0") <= discount <= Decimal("100")):
        raise ValidationError("Discount percentage must be between 0 and 100")
    if (
        settings_data.minimum_packages is not None
        and settings_data.maximum_packages is not None
        and settings_data.minimum_packages > settings_data.maximum_packages
    ):
        raise ValidationError("Minimum packages cannot exceed maximum packages")

    consolidation = get_consolidation_settings(db, forwarder_id)
    if consolidation is None:
        consolidation = ConsolidationSettings(forwarder_id=forwarder_id)
        db.add(consolidation)

    for key, value in settings_data.model_dump().items():
        setattr(consolidation, key, value)

    db.commit()
    db.refresh(consolidation)
    logger.info(
        f"Consolidation settings for forwarder {forwarder_id}: enabled={consolidation.is_enabled} "
        f"holding={consolidation.holding_period_days}d discount={consolidation.discount_percentage}"
    )
    return consolidation
