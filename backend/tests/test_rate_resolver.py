from decimal import Decimal

import pytest

from app.models import ServiceType, ShippingType, ShippingZone, WeightSlab
from app.schemas.shipping import RateQuoteRequest, ShippingZoneUpdate, WeightSlabIn
from app.services import shipping_config
from app.services.errors import (
    ConflictError,
    InvalidSlabConfiguration,
    NoRateConfigured,
    NoWeightSlabConfigured,
    NoZoneConfigured,
    ValidationError,
)
from app.services.rate_resolver import (
    apply_consolidation_discount,
    compute_base_cost,
    quote_order,
    resolve_rate,
    search_shipping_options,
    select_weight_slab,
)
from factories import (
    enable_consolidation,
    make_customer,
    make_forwarder,
    make_order,
    make_rate,
    make_warehouse,
    make_zone,
)


def _slabs():
    return [
        WeightSlab(min_weight=Decimal("0"), max_weight=Decimal("1"), flat_rate=Decimal("35"), label="0-1kg"),
        WeightSlab(min_weight=Decimal("1"), max_weight=Decimal("5"), rate_per_kg=Decimal("25"), label="1-5kg"),
        WeightSlab(min_weight=Decimal("5"), max_weight=None, rate_per_kg=Decimal("22"), label="5kg+"),
    ]


def _request(forwarder, **overrides):
    data = dict(
        forwarder_id=forwarder.id,
        destination_country="SG",
        courier="DHL",
        service_type=ServiceType.EXPRESS,
        weight=Decimal("3.5"),
        is_consolidated=False,
    )
    data.update(overrides)
    return RateQuoteRequest(**data)


@pytest.mark.parametrize(
    "weight,label",
    [
        ("0.2", "0-1kg"),
        ("0.999", "0-1kg"),
        ("1", "1-5kg"),
        ("3.5", "1-5kg"),
        ("5", "5kg+"),
        ("120", "5kg+"),
    ],
)
def test_select_weight_slab_boundaries_go_to_declaring_minimum(weight, label):
    assert select_weight_slab(_slabs(), Decimal(weight)).label == label


def test_select_weight_slab_gap_raises():
    slabs = [
        WeightSlab(min_weight=Decimal("0"), max_weight=Decimal("1"), flat_rate=Decimal("10"), label="0-1kg"),
        WeightSlab(min_weight=Decimal("2"), max_weight=Decimal("5"), flat_rate=Decimal("20"), label="2-5kg"),
    ]
    with pytest.raises(NoWeightSlabConfigured):
        select_weight_slab(slabs, Decimal("1.5"))


def test_compute_base_cost_flat_and_per_kg():
    flat, per_kg, _ = _slabs()
    assert compute_base_cost(flat, Decimal("0.5")) == Decimal("35.00")
    assert compute_base_cost(per_kg, Decimal("3.5")) == Decimal("87.50")


def test_compute_base_cost_without_any_rate():
    slab = WeightSlab(min_weight=Decimal("0"), max_weight=None, label="broken")
    with pytest.raises(InvalidSlabConfiguration):
        compute_base_cost(slab, Decimal("1"))


def test_consolidation_discount_twenty_percent_of_hundred():
    assert apply_consolidation_discount(Decimal("100"), Decimal("20")) == Decimal("80.00")
    assert apply_consolidation_discount(Decimal("100"), None) == Decimal("100.00")


def test_resolve_rate_example_scenario(db):
    forwarder = make_forwarder(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)

    quote = resolve_rate(db, _request(forwarder))

    assert quote.zone_name == "Asia"
    assert quote.weight_slab == "1-5kg"
    assert quote.base_cost == Decimal("87.50")
    assert quote.total_cost == Decimal("92.50")
    assert quote.estimated_delivery == "2-4"
    assert quote.breakdown.handling_fee == Decimal("5.00")
    assert quote.features["tracking_included"] is True


def test_resolve_rate_adds_optional_fees(db):
    forwarder = make_forwarder(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone, insurance_fee=Decimal("2.50"), fuel_surcharge=Decimal("4"))

    quote = resolve_rate(db, _request(forwarder))

    assert quote.total_cost == Decimal("99.00")
    assert quote.breakdown.insurance_fee == Decimal("2.50")
    assert quote.breakdown.fuel_surcharge == Decimal("4.00")


def test_resolve_rate_picks_zone_containing_country(db):
    forwarder = make_forwarder(db)
    asia = make_zone(db, forwarder, name="Asia", countries=["SG", "MY"])
    europe = make_zone(db, forwarder, name="Europe", countries=["DE", "FR"])
    make_rate(db, forwarder, asia)
    make_rate(db, forwarder, europe, handling_fee=Decimal("50"))

    quote = resolve_rate(db, _request(forwarder, destination_country="sg"))

    assert quote.zone_name == "Asia"
    assert quote.total_cost == Decimal("92.50")


def test_resolve_rate_consolidated_discount(db):
    forwarder = make_forwarder(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)
    enable_consolidation(db, forwarder, discount=Decimal("20"))

    quote = resolve_rate(db, _request(forwarder, is_consolidated=True))

    assert quote.total_cost == Decimal("74.00")
    assert quote.breakdown.discount_amount == Decimal("18.50")

    # Not consolidated: no discount
    assert resolve_rate(db, _request(forwarder)).total_cost == Decimal("92.50")


def test_resolve_rate_no_zone(db):
    forwarder = make_forwarder(db)
    make_zone(db, forwarder)
    with pytest.raises(NoZoneConfigured):
        resolve_rate(db, _request(forwarder, destination_country="US"))


def test_resolve_rate_ignores_inactive_zone(db):
    forwarder = make_forwarder(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)
    shipping_config.update_zone(
        db, forwarder.id, zone.id, ShippingZoneUpdate(is_active=False)
    )
    with pytest.raises(NoZoneConfigured):
        resolve_rate(db, _request(forwarder))


def test_resolve_rate_no_rate_for_service(db):
    forwarder = make_forwarder(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)
    with pytest.raises(NoRateConfigured):
        resolve_rate(db, _request(forwarder, service_type=ServiceType.OVERNIGHT))
    with pytest.raises(NoRateConfigured):
        resolve_rate(db, _request(forwarder, courier="FedEx"))


def test_resolve_rate_rejects_negative_weight(db):
    forwarder = make_forwarder(db)
    with pytest.raises(ValidationError):
        resolve_rate(db, _request(forwarder, weight=Decimal("-1")))


def test_resolve_rate_zero_weight_uses_first_slab(db):
    forwarder = make_forwarder(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)

    quote = resolve_rate(db, _request(forwarder, weight=Decimal("0")))

    assert quote.weight_slab == "0-1kg"
    assert quote.base_cost == Decimal("35.00")
    assert quote.total_cost == Decimal("40.00")


def test_warehouse_specific_rate_wins(db):
    forwarder = make_forwarder(db)
    warehouse = make_warehouse(db, forwarder)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)
    make_rate(db, forwarder, zone, warehouse_id=warehouse.id, handling_fee=Decimal("1"))

    assert resolve_rate(db, _request(forwarder)).total_cost == Decimal("92.50")
    assert resolve_rate(db, _request(forwarder, warehouse_id=warehouse.id)).total_cost == Decimal("88.50")


def test_resolve_rate_reports_overlapping_active_zones(db):
    forwarder = make_forwarder(db)
    make_zone(db, forwarder, name="Asia", countries=["SG"])
    # Bypass the write-time check to simulate legacy data
    other = ShippingZone(forwarder_id=forwarder.id, name="Legacy", countries=["SG"], is_active=True)
    db.add(other)
    db.commit()
    with pytest.raises(ConflictError):
        resolve_rate(db, _request(forwarder))


def test_quote_order_uses_order_details(db):
    forwarder = make_forwarder(db)
    warehouse = make_warehouse(db, forwarder)
    customer = make_customer(db)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)
    enable_consolidation(db, forwarder)
    order = make_order(db, forwarder, warehouse, customer, shipping_type=ShippingType.CONSOLIDATED)
    order.courier = "DHL"
    db.commit()

    quote = quote_order(db, order.id, ServiceType.EXPRESS)

    assert quote.zone_name == "Asia"
    assert quote.total_cost == Decimal("74.00")


def test_quote_order_without_courier(db):
    forwarder = make_forwarder(db)
    warehouse = make_warehouse(db, forwarder)
    customer = make_customer(db)
    order = make_order(db, forwarder, warehouse, customer)
    with pytest.raises(ValidationError):
        quote_order(db, order.id, ServiceType.EXPRESS)


# --- customer shipping search ------------------------------------------------

def test_search_shipping_options_skips_private_rates_and_slab_misses(db):
    forwarder = make_forwarder(db)
    warehouse = make_warehouse(db, forwarder)
    zone = make_zone(db, forwarder)
    make_rate(db, forwarder, zone)
    make_rate(db, forwarder, zone, courier="UPS", is_public=False)
    make_rate(
        db,
        forwarder,
        zone,
        courier="FedEx",
        weight_slabs=[WeightSlabIn(min_weight=Decimal("0"), max_weight=Decimal("2"), flat_rate=Decimal("20"), label="0-2kg")],
    )
    make_rate(db, forwarder, zone, warehouse_id=warehouse.id, handling_fee=Decimal("1"))

    options = search_shipping_options(db, "sg", Decimal("3.5"))

    assert [(o.courier, o.total_cost) for o in options] == [("DHL", Decimal("92.50"))]
    assert options[0].forwarder_name == "Lion City Forwarding"
    assert options[0].weight_slab == "1-5kg"
    assert options[0].estimated_delivery == "2-4"

    light = search_shipping_options(db, "SG", Decimal("1.5"))
    assert sorted(o.courier for o in light) == ["DHL", "FedEx"]


def test_search_shipping_options_across_forwarders(db):
    first = make_forwarder(db)
    second = make_forwarder(db, name="Merlion Express")
    make_rate(db, first, make_zone(db, first))
    make_rate(db, second, make_zone(db, second, countries=["SG"]), handling_fee=Decimal("0"))
    third = make_forwarder(db, name="Harbour Freight")
    make_rate(db, third, make_zone(db, third), display_order=1, handling_fee=Decimal("50"))

    options = search_shipping_options(db, "SG", Decimal("3.5"))

    assert [o.forwarder_name for o in options] == ["Harbour Freight", "Merlion Express", "Lion City Forwarding"]
    assert search_shipping_options(db, "US", Decimal("3.5")) == []


def test_search_shipping_options_rejects_negative_weight(db):
    with pytest.raises(ValidationError):
        search_shipping_options(db, "SG", Decimal("-0.5"))
