def test_health(client):
    res = client.get("/v1/meta/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert "X-Latency-Ms" in res.headers


def test_policy_values(client):
    data = client.get("/v1/meta/policy").json()
    assert data == {
        "passing_grade": 70.0,
        "default_attendance_pool_score": 10.0,
        "chat_poll_interval_sec": 5,
    }


def test_unknown_route_uses_error_shape(client):
    res = client.get("/v1/nope")
    assert res.status_code == 404
    body = res.json()
    assert body["error"]["code"] == "NOT_FOUND"
    assert "generated_at" in body
