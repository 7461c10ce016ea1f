from .customer import CustomerCreate, CustomerResponse
from .forwarder import (
    ForwarderCreate,
    ForwarderResponse,
    WarehouseCreate,
    WarehouseResponse,
    ConsolidationSettingsUpdate,
    ConsolidationSettingsResponse,
)
from .staff import StaffCreate, StaffResponse
from .shipping import (
    ShippingZoneCreate,
    ShippingZoneUpdate,
    ShippingZoneResponse,
    ZonePresetRequest,
    WeightSlabIn,
    ShippingRateCreate,
    ShippingRateUpdate,
    ShippingRateResponse,
    RateQuoteRequest,
    RateQuoteResponse,
)
from .order import (
    OrderCreate,
    OrderResponse,
    OrderListResponse,
    ScanData,
    StatusUpdate,
    ScanRequest,
    CourierAssign,
    BulkCourierAssign,
    OrderStatusHistoryResponse,
)

__all__ = [
    "CustomerCreate",
    "CustomerResponse",
    "ForwarderCreate",
    "ForwarderResponse",
    "WarehouseCreate",
    "WarehouseResponse",
    "ConsolidationSettingsUpdate",
    "ConsolidationSettingsResponse",
    "StaffCreate",
    "StaffResponse",
    "ShippingZoneCreate",
    "ShippingZoneUpdate",
    "ShippingZoneResponse",
    "ZonePresetRequest",
    "WeightSlabIn",
    "ShippingRateCreate",
    "ShippingRateUpdate",
    "ShippingRateResponse",
    "RateQuoteRequest",
    "RateQuoteResponse",
    "OrderCreate",
    "OrderResponse",
    "OrderListResponse",
    "ScanData",
    "StatusUpdate",
    "ScanRequest",
    "CourierAssign",
    "BulkCourierAssign",
    "OrderStatusHistoryResponse",
]
