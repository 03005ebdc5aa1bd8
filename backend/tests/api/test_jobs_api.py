"""API tests: job endpoints and revenue."""
import pytest

from conftest import make_vehicle

pytestmark = pytest.mark.api

RIDE = {
    "job_type": "ride",
    "customer_id": "c1",
    "region": "us-west-2",
    "pickup_lat": 37.7749,
    "pickup_lng": -122.4194,
    "destination_lat": 37.7849,
    "destination_lng": -122.4094,
}


def test_create_ride_without_vehicle_is_pending(client):
    r = client.post("/api/jobs", json=RIDE)
    assert r.status_code == 201
    data = r.json()
    assert data["id"] == "ride-1"
    assert data["status"] == "pending"
    assert data["assigned_vehicle_id"] is None
    assert data["fare_amount"] > 2.50


def test_create_ride_assigns_vehicle(client, fleet_service):
    fleet_service.register_vehicle(make_vehicle("v1"))
    data = client.post("/api/jobs", json=RIDE).json()
    assert data["status"] == "assigned"
    assert data["assigned_vehicle_id"] == "v1"
    assert client.get("/api/vehicles/v1").json()["status"] == "busy"


def test_create_delivery_with_details(client):
    body = {
        **RIDE,
        "job_type": "delivery",
        "delivery_details": {"restaurant_name": "Lardo", "items": ["pork sandwich"], "instructions": "leave at door"},
    }
    data = client.post("/api/jobs", json=body).json()
    assert data["id"] == "delivery-1"
    assert data["fare_amount"] == pytest.approx(8.99)
    assert data["distance_fare"] == 0.0
    assert data["delivery_details"]["items"] == ["pork sandwich"]


def test_create_job_validation(client):
    assert client.post("/api/jobs", json={**RIDE, "job_type": "freight"}).status_code == 422
    assert client.post("/api/jobs", json={**RIDE, "pickup_lat": 123}).status_code == 422


def test_get_and_list_jobs(client):
    client.post("/api/jobs", json=RIDE)
    client.post("/api/jobs", json=RIDE)
    assert [j["id"] for j in client.get("/api/jobs").json()] == ["ride-1", "ride-2"]
    assert client.get("/api/jobs/ride-2").json()["customer_id"] == "c1"
    assert client.get("/api/jobs/ride-9").status_code == 404


def test_jobs_by_status_and_vehicle(client, fleet_service):
    client.post("/api/jobs", json=RIDE)
    fleet_service.register_vehicle(make_vehicle("v1"))
    client.post("/api/jobs", json=RIDE)
    assert [j["id"] for j in client.get("/api/jobs/status/pending").json()] == ["ride-1"]
    assert [j["id"] for j in client.get("/api/jobs/status/assigned").json()] == ["ride-2"]
    assert [j["id"] for j in client.get("/api/jobs/vehicle/v1").json()] == ["ride-2"]
    assert client.get("/api/jobs/status/lost").status_code == 400


def test_complete_job(client, fleet_service):
    fleet_service.register_vehicle(make_vehicle("v1"))
    job_id = client.post("/api/jobs", json=RIDE).json()["id"]
    r = client.post(f"/api/jobs/{job_id}/complete")
    assert r.status_code == 200
    assert r.json()["status"] == "completed"
    assert r.json()["completed_at"] is not None
    assert client.get("/api/vehicles/v1").json()["status"] == "available"


def test_complete_pending_job_409(client):
    job_id = client.post("/api/jobs", json=RIDE).json()["id"]
    assert client.post(f"/api/jobs/{job_id}/complete").status_code == 409


def test_complete_unknown_job_404(client):
    assert client.post("/api/jobs/ride-404/complete").status_code == 404


def test_process_pending(client, fleet_service):
    client.post("/api/jobs", json=RIDE)
    fleet_service.register_vehicle(make_vehicle("v1"))
    r = client.post("/api/jobs/process-pending")
    assert r.status_code == 200
    assert r.json()["assigned"] == 1
    assert client.get("/api/jobs/ride-1").json()["status"] == "assigned"


def test_active_count(client, fleet_service):
    client.post("/api/jobs", json=RIDE)
    fleet_service.register_vehicle(make_vehicle("v1"))
    client.post("/api/jobs", json=RIDE)
    assert client.get("/api/jobs/active-count").json() == {"active_jobs": 2}
    client.post("/api/jobs/ride-2/complete")
    assert client.get("/api/jobs/active-count").json() == {"active_jobs": 1}


def test_revenue(client, fleet_service):
    fleet_service.register_vehicle(make_vehicle("v1"))
    ride = client.post("/api/jobs", json=RIDE).json()
    client.post(f"/api/jobs/{ride['id']}/complete")
    client.post("/api/jobs", json=RIDE)

    data = client.get("/api/revenue").json()
    assert data["completed_jobs"] == 1
    assert data["ride_count"] == 1
    assert data["delivery_count"] == 0
    assert data["total_revenue"] == pytest.approx(ride["fare_amount"])
    assert data["avg_delivery_fare"] == 0.0
