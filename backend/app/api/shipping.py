"""
Shipping zone, rate and quote API endpoints.
"""
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
from uuid import UUID
from app.config.zone_presets import list_presets
from app.db.database import get_db
from app.schemas.shipping import (
    CopyRatesRequest,
    HierarchicalRates,
    RateQuoteRequest,
    RateQuoteResponse,
    ShippingOptionResponse,
    ShippingRateCreate,
    ShippingRateResponse,
    ShippingRateUpdate,
    ShippingZoneCreate,
    ShippingZoneResponse,
    ShippingZoneUpdate,
    ZonePresetRequest,
)
from app.services import shipping_config
from app.services.rate_resolver import resolve_rate, search_shipping_options

router = APIRouter()


@router.get("/presets", response_model=Dict[str, List[str]])
async def get_zone_presets():
    """Continents and regions available as zone presets."""
    return list_presets()


@router.post("/quote", response_model=RateQuoteResponse)
async def quote(
    request: RateQuoteRequest,
    db: Session = Depends(get_db)
):
    """Price a parcel against the forwarder's rate table."""
    return resolve_rate(db, request).to_dict()


@router.get("/countries", response_model=List[str])
async def available_countries(db: Session = Depends(get_db)):
    """Destination countries any active forwarder ships to."""
    return shipping_config.list_available_countries(db)


@router.get("/options", response_model=List[ShippingOptionResponse])
async def shipping_options(
    country: str,
    weight: Decimal = Query(...),
    db: Session = Depends(get_db)
):
    """Public shipping options across forwarders for a destination and weight."""
    return [option.to_dict() for option in search_shipping_options(db, country, weight)]


@router.get("/{forwarder_id}/zones", response_model=List[ShippingZoneResponse])
async def list_zones(
    forwarder_id: UUID,
    active_only: bool = False,
    db: Session = Depends(get_db)
):
    return shipping_config.list_zones(db, forwarder_id, active_only=active_only)


@router.post("/{forwarder_id}/zones", response_model=ShippingZoneResponse, status_code=status.HTTP_201_CREATED)
async def create_zone(
    forwarder_id: UUID,
    zone_data: ShippingZoneCreate,
    db: Session = Depends(get_db)
):
    return shipping_config.create_zone(db, forwarder_id, zone_data)


@router.post("/{forwarder_id}/zones/preset", response_model=ShippingZoneResponse, status_code=status.HTTP_201_CREATED)
async def create_zone_from_preset(
    forwarder_id: UUID,
    preset: ZonePresetRequest,
    db: Session = Depends(get_db)
):
    return shipping_config.create_zone_from_preset(
        db, forwarder_id, preset.continent, region=preset.region, name=preset.name
    )


@router.patch("/{forwarder_id}/zones/{zone_id}", response_model=ShippingZoneResponse)
async def update_zone(
    forwarder_id: UUID,
    zone_id: UUID,
    zone_data: ShippingZoneUpdate,
    db: Session = Depends(get_db)
):
    return shipping_config.update_zone(db, forwarder_id, zone_id, zone_data)


@router.delete("/{forwarder_id}/zones/{zone_id}")
async def delete_zone(
    forwarder_id: UUID,
    zone_id: UUID,
    db: Session = Depends(get_db)
):
    """Delete a zone; its rates are deactivated, not deleted."""
    deactivated = shipping_config.delete_zone(db, forwarder_id, zone_id)
    return {"deleted": str(zone_id), "rates_deactivated": deactivated}


@router.get("/{forwarder_id}/rates", response_model=List[ShippingRateResponse])
async def list_rates(
    forwarder_id: UUID,
    zone_id: Optional[UUID] = None,
    public_only: bool = False,
    db: Session = Depends(get_db)
):
    return shipping_config.list_rates(db, forwarder_id, zone_id=zone_id, public_only=public_only)


@router.get("/{forwarder_id}/rates/hierarchical", response_model=HierarchicalRates)
async def get_hierarchical_rates(
    forwarder_id: UUID,
    db: Session = Depends(get_db)
):
    """Rates organized as zone -> courier -> service type."""
    return shipping_config.get_hierarchical_rates(db, forwarder_id)


@router.post("/{forwarder_id}/rates", response_model=ShippingRateResponse, status_code=status.HTTP_201_CREATED)
async def create_rate(
    forwarder_id: UUID,
    rate_data: ShippingRateCreate,
    db: Session = Depends(get_db)
):
    return shipping_config.create_rate(db, forwarder_id, rate_data)


@router.patch("/{forwarder_id}/rates/{rate_id}", response_model=ShippingRateResponse)
async def update_rate(
    forwarder_id: UUID,
    rate_id: UUID,
    rate_data: ShippingRateUpdate,
    db: Session = Depends(get_db)
):
    return shipping_config.update_rate(db, forwarder_id, rate_id, rate_data)


@router.delete("/{forwarder_id}/rates/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rate(
    forwarder_id: UUID,
    rate_id: UUID,
    db: Session = Depends(get_db)
):
    shipping_config.delete_rate(db, forwarder_id, rate_id)


@router.post(
    "/{forwarder_id}/warehouses/{warehouse_id}/copy-rates",
    response_model=List[ShippingRateResponse],
    status_code=status.HTTP_201_CREATED,
)
async def copy_default_rates(
    forwarder_id: UUID,
    warehouse_id: UUID,
    request: CopyRatesRequest,
    db: Session = Depends(get_db)
):
    return shipping_config.copy_default_rates_to_warehouse(
        db, forwarder_id, warehouse_id, rate_ids=request.rate_ids
    )
