from .customer import Customer
from .forwarder import Forwarder, Warehouse, ConsolidationSettings, ConsolidationFrequency
from .staff import Staff, StaffActivity, StaffRole, ActivityType, staff_warehouses
from .shipping import ShippingZone, ShippingRate, WeightSlab, ServiceType
from .order import Order, OrderStatus, ShippingType
from .order_status_history import OrderStatusHistory, ActorType

__all__ = [
    "Customer",
    "Forwarder",
    "Warehouse",
    "ConsolidationSettings",
    "ConsolidationFrequency",
    "Staff",
    "StaffActivity",
    "StaffRole",
    "ActivityType",
    "staff_warehouses",
    "ShippingZone",
    "ShippingRate",
    "WeightSlab",
    "ServiceType",
    "Order",
    "OrderStatus",
    "ShippingType",
    "OrderStatusHistory",
    "ActorType",
]
