"""
End-to-end over HTTP: a customer asks for a vehicle, staff confirm and convert
the request, the rental is completed, and the calendar shows it.
"""


def _submit(client, ids, start="2030-06-01", end="2030-06-05", vehicle="axia", customer="alice"):
    return client.post("/booking-requests", json={
        "customerId": ids[customer],
        "vehicleId": ids[vehicle],
        "startDate": start,
        "endDate": end,
        "customerMessage": "Need it at KLIA",
    })


def test_request_to_completed_rental(client, seeded_ids):
    r = _submit(client, seeded_ids)
    assert r.status_code == 201, r.get_json()
    req = r.get_json()
    assert req["status"] == "pending"
    assert req["totalDays"] == 4
    assert req["customerName"] == "Alice Tan"

    r = client.patch(f"/booking-requests/{req['id']}/status", json={"status": "confirmed", "staffId": 3})
    assert r.status_code == 200
    assert r.get_json()["confirmedByStaffId"] == 3

    r = client.post(f"/booking-requests/{req['id']}/convert", json={"rentalPerDay": 100, "deposit": 50, "staffId": 3})
    assert r.status_code == 201
    rental = r.get_json()
    assert rental["grandTotal"] == 450.0
    assert rental["bookingRequestId"] == req["id"]
    assert rental["incomplete"] is True

    assert client.get(f"/booking-requests/{req['id']}").get_json()["status"] == "completed"

    r = client.patch(f"/rentals/{rental['id']}/complete", json={
        "currentMileage": "15000",
        "fuelLevel": 2,
        "vehiclePhotos": ["/u/1.jpg"],
        "paymentProofUrl": "/u/pay.jpg",
        "signatureUrl": "/u/sig.png",
        "staffId": 3,
    })
    assert r.status_code == 200
    done = r.get_json()
    assert done["status"] == "completed"
    assert done["incomplete"] is False
    assert done["agreementPdfUrl"] == f"/backups/agreement-{rental['id']}.json"

    cal = client.get("/calendar?month=6&year=2030").get_json()
    assert [(row["id"], row["customerName"]) for row in cal] == [(rental["id"], "Alice Tan")]

    logs = client.get("/staff/logs?staffId=3").get_json()
    assert {entry["action"] for entry in logs} == {"BOOKING_CONFIRMED", "BOOKING_CONVERTED", "RENTAL_COMPLETED"}


def test_availability_endpoints(client, seeded_ids):
    r = client.post("/rentals", json={
        "customerId": seeded_ids["alice"],
        "vehicle": "Perodua Axia",
        "startDate": "2030-06-01",
        "endDate": "2030-06-05",
    })
    assert r.status_code == 201
    rental_id = r.get_json()["id"]

    r = client.post(f"/vehicles/{seeded_ids['axia']}/availability",
                    json={"startDate": "2030-06-05", "endDate": "2030-06-07"})
    body = r.get_json()
    assert r.status_code == 200
    assert body["available"] is False
    assert body["conflicts"][0]["id"] == rental_id

    r = client.post("/rentals/availability", json={
        "vehicle": "Perodua Axia", "startDate": "2030-06-02", "endDate": "2030-06-04",
        "excludeRentalId": rental_id,
    })
    assert r.get_json() == {"available": True, "conflicts": []}

    schedule = client.get("/vehicles/Perodua%20Axia/schedule?month=6&year=2030").get_json()
    assert [s["id"] for s in schedule] == [rental_id]


def test_cancel_then_rebook(client, seeded_ids):
    payload = {"customerId": seeded_ids["alice"], "vehicle": "Toyota Vios",
               "startDate": "2030-07-01", "endDate": "2030-07-03"}
    first = client.post("/rentals", json=payload).get_json()

    assert client.post("/rentals", json=payload).status_code == 409

    r = client.patch(f"/rentals/{first['id']}/cancel", json={"reason": "flight cancelled"})
    assert r.get_json()["status"] == "cancelled"

    assert client.post("/rentals", json=payload).status_code == 201
    assert len(client.get(f"/rentals?customerId={seeded_ids['alice']}").get_json()) == 2


def test_reject_and_withdraw(client, seeded_ids):
    req = _submit(client, seeded_ids).get_json()
    r = client.patch(f"/booking-requests/{req['id']}/status",
                     json={"status": "rejected", "staffId": 2, "reason": "maintenance"})
    assert r.get_json()["rejectedReason"] == "maintenance"

    rejected = client.get("/booking-requests?status=rejected").get_json()
    assert [x["id"] for x in rejected] == [req["id"]]

    assert client.delete(f"/booking-requests/{req['id']}").status_code == 200
    assert client.get(f"/customers/{seeded_ids['alice']}/booking-requests").get_json() == []
