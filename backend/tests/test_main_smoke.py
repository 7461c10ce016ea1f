def test_openapi_lists_routers(client):
    response = client.get("/openapi.json")
    assert response.status_code == 200
    paths = response.json()["paths"]
    assert "/api/shipping/quote" in paths
    assert "/api/orders/{order_id}/status" in paths


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200


def test_customer_create_and_duplicate(client):
    payload = {"name": "Sam Tan", "email": "sam@example.com", "country": "my"}
    created = client.post("/api/customers/", json=payload)
    assert created.status_code == 201
    assert created.json()["country"] == "MY"

    duplicate = client.post("/api/customers/", json=payload)
    assert duplicate.status_code == 409


def test_forwarder_staff_endpoints(client):
    forwarder = client.post(
        "/api/forwarders/", json={"business_name": "Lion City Forwarding", "contact_email": "ops@example.com"}
    ).json()
    warehouse = client.post(
        f"/api/forwarders/{forwarder['id']}/warehouses", json={"name": "Changi Hub", "max_parcels": 100}
    ).json()

    staff = client.post(
        f"/api/forwarders/{forwarder['id']}/staff",
        json={"name": "Ana", "email": "ana@example.com", "warehouse_ids": [warehouse["id"]]},
    )
    assert staff.status_code == 201
    assert staff.json()["warehouse_ids"] == [warehouse["id"]]

    deactivated = client.delete(f"/api/forwarders/{forwarder['id']}/staff/{staff.json()['id']}")
    assert deactivated.status_code == 200
    assert deactivated.json()["is_active"] is False

    duplicate = client.post(
        "/api/forwarders/", json={"business_name": "Lion City Forwarding", "contact_email": "x@example.com"}
    )
    assert duplicate.status_code == 409
    assert client.get(f"/api/forwarders/{forwarder['id']}/consolidation").status_code == 404
