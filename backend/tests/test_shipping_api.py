SLABS = [
    {"min_weight": "0", "max_weight": "1", "flat_rate": "35", "label": "0-1kg"},
    {"min_weight": "1", "max_weight": "5", "rate_per_kg": "25", "label": "1-5kg"},
    {"min_weight": "5", "rate_per_kg": "22", "label": "5kg+"},
]


def _forwarder(client, name="Lion City Forwarding"):
    response = client.post("/api/forwarders/", json={"business_name": name, "contact_email": "ops@example.com"})
    assert response.status_code == 201
    return response.json()["id"]


def _zone(client, forwarder_id, name="Asia", countries=("SG", "MY")):
    return client.post(f"/api/shipping/{forwarder_id}/zones", json={"name": name, "countries": list(countries)})


def _rate(client, forwarder_id, zone_id, **overrides):
    payload = {
        "zone_id": zone_id,
        "courier": "DHL",
        "service_type": "express",
        "weight_slabs": SLABS,
        "handling_fee": "5",
        "estimated_days_min": 2,
        "estimated_days_max": 4,
    }
    payload.update(overrides)
    return client.post(f"/api/shipping/{forwarder_id}/rates", json=payload)


def _quote(client, forwarder_id, **overrides):
    payload = {
        "forwarder_id": forwarder_id,
        "destination_country": "SG",
        "courier": "DHL",
        "service_type": "express",
        "weight": 3.5,
    }
    payload.update(overrides)
    return client.post("/api/shipping/quote", json=payload)


def test_quote_end_to_end(client):
    forwarder_id = _forwarder(client)
    zone = _zone(client, forwarder_id)
    assert zone.status_code == 201
    assert _rate(client, forwarder_id, zone.json()["id"]).status_code == 201

    response = _quote(client, forwarder_id)

    assert response.status_code == 200
    body = response.json()
    assert body["zone_name"] == "Asia"
    assert body["weight_slab"] == "1-5kg"
    assert body["base_cost"] == "87.50"
    assert body["total_cost"] == "92.50"
    assert body["estimated_delivery"] == "2-4"
    assert body["breakdown"]["handling_fee"] == "5.00"


def test_consolidated_quote_uses_discount(client):
    forwarder_id = _forwarder(client)
    zone_id = _zone(client, forwarder_id).json()["id"]
    _rate(client, forwarder_id, zone_id)
    settings = client.put(
        f"/api/forwarders/{forwarder_id}/consolidation",
        json={"is_enabled": True, "holding_period_days": 7, "discount_percentage": "20"},
    )
    assert settings.status_code == 200

    body = _quote(client, forwarder_id, is_consolidated=True).json()
    assert body["total_cost"] == "74.00"
    assert body["breakdown"]["discount_amount"] == "18.50"


def test_quote_without_zone(client):
    forwarder_id = _forwarder(client)
    _zone(client, forwarder_id)
    response = _quote(client, forwarder_id, destination_country="US")
    assert response.status_code == 404
    assert response.json()["code"] == "NO_ZONE_CONFIGURED"


def test_quote_without_rate(client):
    forwarder_id = _forwarder(client)
    _zone(client, forwarder_id)
    response = _quote(client, forwarder_id)
    assert response.status_code == 404
    assert response.json()["code"] == "NO_RATE_CONFIGURED"


def test_zone_country_conflict(client):
    forwarder_id = _forwarder(client)
    _zone(client, forwarder_id, name="Asia", countries=["SG", "MY"])

    response = _zone(client, forwarder_id, name="SEA", countries=["SG"])

    assert response.status_code == 409
    body = response.json()
    assert body["code"] == "CONFLICT"
    assert "SG" in body["detail"]
    assert "Asia" in body["detail"]


def test_invalid_slabs_rejected(client):
    forwarder_id = _forwarder(client)
    zone_id = _zone(client, forwarder_id).json()["id"]
    gap = [
        {"min_weight": "0", "max_weight": "1", "flat_rate": "35", "label": "0-1kg"},
        {"min_weight": "2", "rate_per_kg": "22", "label": "2kg+"},
    ]
    response = _rate(client, forwarder_id, zone_id, weight_slabs=gap)
    assert response.status_code == 422
    assert response.json()["code"] == "INVALID_SLAB_CONFIGURATION"


def test_zone_from_preset_and_listing(client):
    forwarder_id = _forwarder(client)
    response = client.post(
        f"/api/shipping/{forwarder_id}/zones/preset",
        json={"continent": "Asia", "region": "Southeast Asia"},
    )
    assert response.status_code == 201
    assert response.json()["name"] == "Southeast Asia"

    zones = client.get(f"/api/shipping/{forwarder_id}/zones").json()
    assert [z["name"] for z in zones] == ["Southeast Asia"]


def test_presets_listing(client):
    response = client.get("/api/shipping/presets")
    assert response.status_code == 200
    assert "Southeast Asia" in response.json()["Asia"]


def test_hierarchical_rates(client):
    forwarder_id = _forwarder(client)
    zone_id = _zone(client, forwarder_id).json()["id"]
    rate_id = _rate(client, forwarder_id, zone_id).json()["id"]

    tree = client.get(f"/api/shipping/{forwarder_id}/rates/hierarchical").json()

    assert tree["Asia"]["DHL"]["express"]["id"] == rate_id
    assert len(tree["Asia"]["DHL"]["express"]["weight_slabs"]) == 3


def test_update_and_delete_rate(client):
    forwarder_id = _forwarder(client)
    zone_id = _zone(client, forwarder_id).json()["id"]
    rate_id = _rate(client, forwarder_id, zone_id).json()["id"]

    patched = client.patch(f"/api/shipping/{forwarder_id}/rates/{rate_id}", json={"handling_fee": "7.5"})
    assert patched.status_code == 200
    assert patched.json()["handling_fee"] == "7.50"
    assert _quote(client, forwarder_id).json()["total_cost"] == "95.00"

    assert client.delete(f"/api/shipping/{forwarder_id}/rates/{rate_id}").status_code == 204
    assert client.get(f"/api/shipping/{forwarder_id}/rates").json() == []


def test_delete_zone_reports_deactivated_rates(client):
    forwarder_id = _forwarder(client)
    zone_id = _zone(client, forwarder_id).json()["id"]
    _rate(client, forwarder_id, zone_id)

    response = client.delete(f"/api/shipping/{forwarder_id}/zones/{zone_id}")

    assert response.status_code == 200
    assert response.json()["rates_deactivated"] == 1
    rates = client.get(f"/api/shipping/{forwarder_id}/rates").json()
    assert rates[0]["is_active"] is False
    assert rates[0]["zone_id"] is None


def test_consolidation_holding_period_minimum(client):
    forwarder_id = _forwarder(client)
    response = client.put(
        f"/api/forwarders/{forwarder_id}/consolidation",
        json={"is_enabled": True, "holding_period_days": 3},
    )
    assert response.status_code == 422
    assert response.json()["detail"] == "Holding period must be at least 7 days"


def test_countries_and_options(client):
    forwarder_id = _forwarder(client)
    zone_id = _zone(client, forwarder_id).json()["id"]
    _rate(client, forwarder_id, zone_id)
    _rate(client, forwarder_id, zone_id, courier="UPS", is_public=False)

    assert client.get("/api/shipping/countries").json() == ["MY", "SG"]

    response = client.get("/api/shipping/options", params={"country": "my", "weight": "3.5"})
    assert response.status_code == 200
    options = response.json()
    assert len(options) == 1
    assert options[0]["courier"] == "DHL"
    assert options[0]["forwarder_name"] == "Lion City Forwarding"
    assert options[0]["total_cost"] == "92.50"
    assert options[0]["estimated_delivery"] == "2-4"

    heavy_only = [{"min_weight": "10", "rate_per_kg": "20", "label": "10kg+"}]
    _rate(client, forwarder_id, zone_id, courier="FedEx", weight_slabs=heavy_only)
    still_one = client.get("/api/shipping/options", params={"country": "MY", "weight": "3.5"})
    assert [o["courier"] for o in still_one.json()] == ["DHL"]


def test_copied_rates_override_defaults(client):
    forwarder_id = _forwarder(client)
    warehouse_id = client.post(
        f"/api/forwarders/{forwarder_id}/warehouses", json={"name": "Changi Hub", "max_parcels": 100}
    ).json()["id"]
    zone_id = _zone(client, forwarder_id).json()["id"]
    _rate(client, forwarder_id, zone_id)

    copied = client.post(f"/api/shipping/{forwarder_id}/warehouses/{warehouse_id}/copy-rates", json={})
    assert copied.status_code == 201
    copy = copied.json()[0]
    assert copy["warehouse_id"] == warehouse_id

    client.patch(f"/api/shipping/{forwarder_id}/rates/{copy['id']}", json={"handling_fee": "1"})
    assert _quote(client, forwarder_id, warehouse_id=warehouse_id).json()["total_cost"] == "88.50"
    assert _quote(client, forwarder_id).json()["total_cost"] == "92.50"

    again = client.post(f"/api/shipping/{forwarder_id}/warehouses/{warehouse_id}/copy-rates", json={})
    assert again.status_code == 409
