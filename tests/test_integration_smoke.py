def test_vehicle_list(client, seeded_ids):
    r = client.get("/vehicles")
    assert r.status_code == 200
    assert [v["name"] for v in r.get_json()] == ["Perodua Axia", "Toyota Vios"]


def test_empty_calendar(client, seeded_ids):
    r = client.get("/calendar?month=1&year=2031")
    assert r.status_code == 200
    assert r.get_json() == []
