import httpx

API = "/api/v1"


def turn(message="Hello", **extra):
    return {
        "message": message,
        "details": "product launch",
        "theme": "spring",
        "platform": "instagram",
        **extra,
    }


async def test_send_creates_conversation(client, register, webhook):
    headers, user = await register()
    webhook.respond((200, {"text": "Hi"}))

    response = await client.post(f"{API}/conversations/send", json=turn(), headers=headers)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["conversation"]["user_id"] == user["id"]
    assert data["conversation"]["title"] == "Hello"
    assert [m["role"] for m in data["conversation"]["messages"]] == ["user", "assistant"]
    assert data["generated_content"] == {"text": "Hi"}
    assert data["assistant_message"]["content"] == '{"text": "Hi"}'


async def test_send_to_existing_conversation_returns_ok(client, register):
    headers, _ = await register()
    first = await client.post(f"{API}/conversations/send", json=turn(), headers=headers)
    conversation_id = first.json()["data"]["conversation"]["id"]

    response = await client.post(
        f"{API}/conversations/send",
        json=turn("Again", conversation_id=conversation_id),
        headers=headers,
    )

    assert response.status_code == 200
    assert len(response.json()["data"]["conversation"]["messages"]) == 4


async def test_upstream_failure_keeps_message_count(client, register, webhook):
    headers, _ = await register()
    first = await client.post(f"{API}/conversations/send", json=turn(), headers=headers)
    conversation_id = first.json()["data"]["conversation"]["id"]
    webhook.respond((503, "unavailable"))

    response = await client.post(
        f"{API}/conversations/send",
        json=turn("Again", conversation_id=conversation_id),
        headers=headers,
    )

    assert response.status_code == 503
    fetched = await client.get(f"{API}/conversations/{conversation_id}", headers=headers)
    assert len(fetched.json()["data"]["messages"]) == 2


async def test_unreachable_upstream_is_gateway_timeout(client, register, webhook):
    headers, _ = await register()
    webhook.respond(httpx.ReadTimeout("timed out"))

    response = await client.post(f"{API}/conversations/send", json=turn(), headers=headers)

    assert response.status_code == 504
    listing = await client.get(f"{API}/conversations/", headers=headers)
    assert listing.json()["data"]["total"] == 0


async def test_other_user_is_forbidden(client, register):
    alice, _ = await register(email="alice@mail.com")
    bob, _ = await register(email="bob@mail.com", name="Bob")
    first = await client.post(f"{API}/conversations/send", json=turn(), headers=alice)
    conversation_id = first.json()["data"]["conversation"]["id"]

    send = await client.post(
        f"{API}/conversations/send",
        json=turn("mine now", conversation_id=conversation_id),
        headers=bob,
    )
    read = await client.get(f"{API}/conversations/{conversation_id}", headers=bob)
    rename = await client.put(
        f"{API}/conversations/{conversation_id}", json={"title": "x"}, headers=bob
    )
    remove = await client.delete(f"{API}/conversations/{conversation_id}", headers=bob)

    assert [r.status_code for r in (send, read, rename, remove)] == [403, 403, 403, 403]
    fetched = await client.get(f"{API}/conversations/{conversation_id}", headers=alice)
    assert len(fetched.json()["data"]["messages"]) == 2


async def test_conversation_routes_require_token(client):
    assert (await client.get(f"{API}/conversations/")).status_code == 401
    assert (await client.post(f"{API}/conversations/send", json=turn())).status_code == 401


async def test_list_update_and_delete(client, register):
    headers, _ = await register()
    first = await client.post(f"{API}/conversations/send", json=turn(), headers=headers)
    conversation_id = first.json()["data"]["conversation"]["id"]

    listing = await client.get(f"{API}/conversations/", headers=headers)
    assert listing.json()["data"]["total"] == 1
    assert listing.json()["data"]["items"][0]["latest_message"]["role"] == "assistant"

    renamed = await client.put(
        f"{API}/conversations/{conversation_id}",
        json={"title": "Spring launch"},
        headers=headers,
    )
    assert renamed.status_code == 200
    assert renamed.json()["data"]["title"] == "Spring launch"

    deleted = await client.delete(f"{API}/conversations/{conversation_id}", headers=headers)
    assert deleted.status_code == 200
    missing = await client.get(f"{API}/conversations/{conversation_id}", headers=headers)
    assert missing.status_code == 404


async def test_missing_conversation_is_not_found(client, register):
    headers, _ = await register()
    missing = "01NOTAREALCONVERSATIONID00"

    send = await client.post(
        f"{API}/conversations/send",
        json=turn(conversation_id=missing),
        headers=headers,
    )
    rename = await client.put(
        f"{API}/conversations/{missing}", json={"title": "x"}, headers=headers
    )
    remove = await client.delete(f"{API}/conversations/{missing}", headers=headers)

    assert [r.status_code for r in (send, rename, remove)] == [404, 404, 404]


async def test_update_requires_title(client, register):
    headers, _ = await register()
    first = await client.post(f"{API}/conversations/send", json=turn(), headers=headers)
    conversation_id = first.json()["data"]["conversation"]["id"]

    response = await client.put(
        f"{API}/conversations/{conversation_id}", json={"title": ""}, headers=headers
    )

    assert response.status_code == 422
    assert "title" in response.json()["errors"]
