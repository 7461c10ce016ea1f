"""
Shipping zone, rate and quote schemas.
"""
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict
from app.models.shipping import ServiceType


class ShippingZoneCreate(BaseModel):
    name: str
    countries: List[str]
    is_active: bool = True


class ShippingZoneUpdate(BaseModel):
    name: Optional[str] = None
    countries: Optional[List[str]] = None
    is_active: Optional[bool] = None


class ZonePresetRequest(BaseModel):
    continent: str
    region: Optional[str] = None
    name: Optional[str] = None


class ShippingZoneResponse(BaseModel):
    id: UUID
    forwarder_id: UUID
    name: str
    countries: List[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WeightSlabIn(BaseModel):
    min_weight: Decimal
    max_weight: Optional[Decimal] = None
    rate_per_kg: Optional[Decimal] = None
    flat_rate: Optional[Decimal] = None
    label: str


class WeightSlabResponse(WeightSlabIn):
    class Config:
        from_attributes = True


class ShippingRateCreate(BaseModel):
    zone_id: UUID
    warehouse_id: Optional[UUID] = None
    courier: str
    service_type: ServiceType
    service_name: Optional[str] = None
    service_description: Optional[str] = None
    weight_slabs: List[WeightSlabIn]
    handling_fee: Decimal = Decimal("0")
    insurance_fee: Optional[Decimal] = None
    fuel_surcharge: Optional[Decimal] = None
    estimated_days_min: int
    estimated_days_max: int
    requires_signature: bool = False
    tracking_included: bool = True
    insurance_included: bool = False
    is_active: bool = True
    is_public: bool = True
    display_order: Optional[int] = None


class ShippingRateUpdate(BaseModel):
    courier: Optional[str] = None
    service_type: Optional[ServiceType] = None
    service_name: Optional[str] = None
    service_description: Optional[str] = None
    weight_slabs: Optional[List[WeightSlabIn]] = None
    handling_fee: Optional[Decimal] = None
    insurance_fee: Optional[Decimal] = None
    fuel_surcharge: Optional[Decimal] = None
    estimated_days_min: Optional[int] = None
    estimated_days_max: Optional[int] = None
    requires_signature: Optional[bool] = None
    tracking_included: Optional[bool] = None
    insurance_included: Optional[bool] = None
    is_active: Optional[bool] = None
    is_public: Optional[bool] = None
    display_order: Optional[int] = None


class ShippingRateResponse(BaseModel):
    id: UUID
    forwarder_id: UUID
    zone_id: Optional[UUID] = None
    warehouse_id: Optional[UUID] = None
    courier: str
    service_type: ServiceType
    service_name: Optional[str] = None
    service_description: Optional[str] = None
    weight_slabs: List[WeightSlabResponse]
    handling_fee: Decimal
    insurance_fee: Optional[Decimal] = None
    fuel_surcharge: Optional[Decimal] = None
    estimated_days_min: int
    estimated_days_max: int
    requires_signature: bool
    tracking_included: bool
    insurance_included: bool
    is_active: bool
    is_public: bool
    display_order: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True


class RateQuoteRequest(BaseModel):
    forwarder_id: UUID
    destination_country: str
    courier: str
    service_type: ServiceType
    weight: Decimal
    is_consolidated: bool = False
    warehouse_id: Optional[UUID] = None


class FeeBreakdownResponse(BaseModel):
    weight_charge: Decimal
    handling_fee: Decimal
    insurance_fee: Decimal
    fuel_surcharge: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal


class RateQuoteResponse(BaseModel):
    zone_name: str
    courier: str
    service_type: ServiceType
    weight: Decimal
    base_cost: Decimal
    total_cost: Decimal
    weight_slab: str
    estimated_delivery: str
    estimated_days_min: int
    estimated_days_max: int
    features: Dict[str, bool]
    breakdown: FeeBreakdownResponse

    class Config:
        from_attributes = True


# zone name -> courier -> service type -> rate
HierarchicalRates = Dict[str, Dict[str, Dict[str, ShippingRateResponse]]]


class ShippingOptionResponse(BaseModel):
    rate_id: UUID
    forwarder_id: UUID
    forwarder_name: str
    zone_name: str
    courier: str
    service_type: ServiceType
    service_name: Optional[str] = None
    weight_slab: str
    base_cost: Decimal
    total_cost: Decimal
    estimated_delivery: str
    estimated_days_min: int
    estimated_days_max: int
    features: Dict[str, bool]
    breakdown: FeeBreakdownResponse
    display_order: Optional[int] = None

    class Config:
        from_attributes = True


class CopyRatesRequest(BaseModel):
    # None copies every active default rate
    rate_ids: Optional[List[UUID]] = None
