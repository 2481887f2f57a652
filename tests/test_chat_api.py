def _create(client, auth, user, *others):
    res = client.post("/v1/chat/conversations", json={"participant_ids": [u.id for u in others]}, headers=auth(user))
    assert res.status_code == 200
    return res.json()["data"]


def _send(client, auth, user, conversation_id, content):
    return client.post(
        f"/v1/chat/conversations/{conversation_id}/messages", json={"content": content}, headers=auth(user)
    )


def test_direct_conversation_is_reused(client, school, auth):
    teacher, alice = school["teacher"], school["alice"]
    first = _create(client, auth, teacher, alice)
    assert first["created"] is True

    again = _create(client, auth, alice, teacher)
    assert again == {"conversation_id": first["conversation_id"], "created": False}

    # 3명 이상은 항상 새 방
    group = _create(client, auth, teacher, alice, school["bob"])
    assert group["created"] is True
    assert group["conversation_id"] != first["conversation_id"]


def test_conversation_with_only_self_is_rejected(client, school, auth):
    res = client.post(
        "/v1/chat/conversations", json={"participant_ids": [school["alice"].id]}, headers=auth(school["alice"])
    )
    assert res.status_code == 400


def test_empty_conversation_visible_only_to_initiator(client, school, auth):
    teacher, alice = school["teacher"], school["alice"]
    conv = _create(client, auth, teacher, alice)

    mine = client.get("/v1/chat/conversations", headers=auth(teacher)).json()["data"]
    assert [c["id"] for c in mine] == [conv["conversation_id"]]
    assert client.get("/v1/chat/conversations", headers=auth(alice)).json()["data"] == []

    _send(client, auth, teacher, conv["conversation_id"], "Hello Alice")
    theirs = client.get("/v1/chat/conversations", headers=auth(alice)).json()["data"]
    assert theirs[0]["last_message"]["content"] == "Hello Alice"
    assert theirs[0]["unread"] == 1


def test_send_read_and_unread_count(client, school, auth):
    teacher, alice = school["teacher"], school["alice"]
    conv_id = _create(client, auth, teacher, alice)["conversation_id"]

    res = _send(client, auth, teacher, conv_id, "Homework is due Friday")
    assert res.status_code == 200
    assert res.json()["data"]["read_by_ids"] == [teacher.id]
    _send(client, auth, teacher, conv_id, "Don't forget")

    unread = client.get("/v1/chat/unread", headers=auth(alice)).json()["data"]
    assert unread == {"unread": 2, "poll_interval_sec": 5}
    assert client.get("/v1/chat/unread", headers=auth(teacher)).json()["data"]["unread"] == 0

    marked = client.post(f"/v1/chat/conversations/{conv_id}/read", headers=auth(alice)).json()["data"]
    assert marked == {"marked": 2}
    assert client.get("/v1/chat/unread", headers=auth(alice)).json()["data"]["unread"] == 0

    messages = client.get(f"/v1/chat/conversations/{conv_id}/messages", headers=auth(alice)).json()["data"]
    assert [m["content"] for m in messages] == ["Homework is due Friday", "Don't forget"]
    assert messages[0]["sender_name"] == "Teacher Kim"


def test_outsiders_cannot_read_or_send(client, school, auth):
    teacher, alice, bob = school["teacher"], school["alice"], school["bob"]
    conv_id = _create(client, auth, teacher, alice)["conversation_id"]

    assert client.get(f"/v1/chat/conversations/{conv_id}/messages", headers=auth(bob)).status_code == 403
    assert _send(client, auth, bob, conv_id, "hi").status_code == 403

    # 관리자는 열람만 가능
    assert client.get(f"/v1/chat/conversations/{conv_id}/messages", headers=auth(school["admin"])).status_code == 200
    assert _send(client, auth, school["admin"], conv_id, "hi").status_code == 403


def test_admin_lists_all_conversations(client, school, auth):
    _create(client, auth, school["teacher"], school["alice"])
    assert len(client.get("/v1/chat/conversations/all", headers=auth(school["admin"])).json()["data"]) == 1
    assert client.get("/v1/chat/conversations/all", headers=auth(school["alice"])).status_code == 403


def test_blank_message_is_rejected(client, school, auth):
    conv_id = _create(client, auth, school["teacher"], school["alice"])["conversation_id"]
    assert _send(client, auth, school["teacher"], conv_id, "   ").status_code == 400
    assert _send(client, auth, school["teacher"], conv_id, "").status_code == 422


def test_search_users(client, school, auth):
    res = client.get("/v1/chat/users", params={"q": "al"}, headers=auth(school["teacher"]))
    assert [u["name"] for u in res.json()["data"]] == ["Alice"]

    # 본인 제외 / 짧은 검색어
    assert client.get("/v1/chat/users", params={"q": "Teacher"}, headers=auth(school["teacher"])).json()["data"] == []
    assert client.get("/v1/chat/users", params={"q": "a"}, headers=auth(school["teacher"])).json()["data"] == []
