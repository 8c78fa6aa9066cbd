"""
Integration Tests for the HTTP API

Runs the FastAPI app against the in-memory repository with bearer tokens
signed with the configured secret.
"""
from datetime import timedelta

from laburoya.core.model.schemas import UserRole

API = "/api/v1"


def register(client, headers, uid, role):
    response = client.post(f"{API}/auth/register", json={"role": role}, headers=headers(uid))
    assert response.status_code == 200
    return response.json()


def publish_worker(client, headers, uid, rubro="gastronomia", puesto="Cocinero", **extra):
    return client.post(f"{API}/workers", json={"rubro": rubro, "puesto": puesto, **extra}, headers=headers(uid))


def publish_offer(client, headers, uid, rubro="gastronomia", puesto="Cocinero", **extra):
    return client.post(f"{API}/job-offers", json={"rubro": rubro, "puesto": puesto, **extra}, headers=headers(uid))


def setup_employer(client, headers, uid="emp-1"):
    register(client, headers, uid, "employer")
    response = client.post(
        f"{API}/employers",
        json={"business_name": "Parrilla El Puerto", "rubro": "gastronomia", "address": "Av. Martínez de Hoz 1200"},
        headers=headers(uid)
    )
    assert response.status_code == 200
    return uid


def test_health_and_catalog_need_no_token(client):
    assert client.get("/health").json()["status"] == "ok"

    catalog = client.get(f"{API}/catalog").json()
    assert "Cocinero" in catalog["categories"]["gastronomia"]["puestos"]
    assert "Centro" in catalog["zonas"]


def test_requests_without_valid_token_are_rejected(client, token_factory):
    assert client.get(f"{API}/matches").status_code == 401

    expired = token_factory("w-1", expires_in=timedelta(minutes=-5))
    response = client.get(f"{API}/matches", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid or expired token"}

    forged = token_factory("w-1", secret="not-the-secret")
    assert client.get(f"{API}/matches", headers={"Authorization": f"Bearer {forged}"}).status_code == 401


def test_register_rejects_superuser_role(client, headers):
    response = client.post(f"{API}/auth/register", json={"role": "superuser"}, headers=headers("u-1"))

    assert response.status_code == 400
    assert response.json()["fields"][0]["field"] == "role"


def test_worker_profile_requires_rubro_and_puesto(client, headers):
    register(client, headers, "w-1", "worker")

    response = client.post(f"{API}/workers", json={"rubro": "gastronomia"}, headers=headers("w-1"))

    assert response.status_code == 400
    assert [f["field"] for f in response.json()["fields"]] == ["puesto"]


def test_only_employers_publish_offers(client, headers):
    register(client, headers, "w-1", "worker")

    assert publish_offer(client, headers, "w-1").status_code == 403


def test_match_accept_and_chat_scenario(client, headers):
    setup_employer(client, headers)
    offer = publish_offer(client, headers, "emp-1", salary="$ 900.000")
    assert offer.status_code == 201
    assert offer.json()["new_matches"] == 0
    offer_id = offer.json()["id"]

    register(client, headers, "w-1", "worker")
    saved = publish_worker(client, headers, "w-1", zona="Centro")
    assert saved.status_code == 200
    body = saved.json()
    assert body["message"] == "Worker profile created"
    assert body["new_matches"] == 1
    match = body["matches"][0]
    assert match["worker_id"] == "w-1"
    assert match["employer_id"] == "emp-1"
    assert match["offer_id"] == offer_id
    assert match["status"] == "pending"

    again = publish_worker(client, headers, "w-1", zona="Centro").json()
    assert again["message"] == "Worker profile updated"
    assert again["new_matches"] == 0

    worker_view = client.get(f"{API}/matches", headers=headers("w-1")).json()
    assert worker_view[0]["employer"]["business_name"] == "Parrilla El Puerto"
    assert worker_view[0]["job_offer"]["salary"] == "$ 900.000"
    employer_view = client.get(f"{API}/matches", headers=headers("emp-1")).json()
    assert employer_view[0]["worker"]["zona"] == "Centro"

    accepted = client.patch(
        f"{API}/matches/{match['id']}/status", json={"status": "accepted"}, headers=headers("emp-1")
    )
    assert accepted.status_code == 200
    assert accepted.json() == {"id": match["id"], "status": "accepted"}

    opened = client.post(f"{API}/chats/{match['id']}", headers=headers("w-1"))
    assert opened.status_code == 201
    chat_id = opened.json()["id"]
    reopened = client.post(f"{API}/chats/{match['id']}", headers=headers("emp-1"))
    assert reopened.status_code == 200
    assert reopened.json()["id"] == chat_id

    register(client, headers, "u-3", "worker")
    assert client.post(f"{API}/chats/{match['id']}", headers=headers("u-3")).status_code == 403

    sent = client.post(f"{API}/chats/{chat_id}/messages", json={"text": " Hola! "}, headers=headers("w-1"))
    assert sent.status_code == 201
    assert sent.json()["text"] == "Hola!"
    client.post(f"{API}/chats/{chat_id}/messages", json={"text": "Te espero mañana"}, headers=headers("emp-1"))

    blank = client.post(f"{API}/chats/{chat_id}/messages", json={"text": "   "}, headers=headers("w-1"))
    assert blank.status_code == 400
    assert blank.json() == {
        "error": "Message text is required",
        "fields": [{"field": "text", "message": "Message text is required"}]
    }

    messages = client.get(f"{API}/chats/{chat_id}/messages", headers=headers("emp-1")).json()
    assert [m["text"] for m in messages] == ["Hola!", "Te espero mañana"]
    latest = client.get(f"{API}/chats/{chat_id}/messages?limit=1", headers=headers("w-1")).json()
    assert [m["text"] for m in latest] == ["Te espero mañana"]
    assert client.get(f"{API}/chats/{chat_id}/messages", headers=headers("u-3")).status_code == 403

    chats = client.get(f"{API}/chats", headers=headers("w-1")).json()
    assert chats[0]["last_message"] == "Te espero mañana"
    assert chats[0]["participant"]["business_name"] == "Parrilla El Puerto"


def test_match_status_errors(client, headers):
    setup_employer(client, headers)
    publish_offer(client, headers, "emp-1")
    register(client, headers, "w-1", "worker")
    match_id = publish_worker(client, headers, "w-1").json()["matches"][0]["id"]
    register(client, headers, "u-3", "worker")

    invalid = client.patch(f"{API}/matches/{match_id}/status", json={"status": "pending"}, headers=headers("w-1"))
    assert invalid.status_code == 400

    unknown = client.patch(f"{API}/matches/{match_id}/status", json={"status": "maybe"}, headers=headers("w-1"))
    assert unknown.status_code == 400

    forbidden = client.patch(f"{API}/matches/{match_id}/status", json={"status": "accepted"}, headers=headers("u-3"))
    assert forbidden.status_code == 403
    assert forbidden.json() == {"error": "Unauthorized"}

    missing = client.patch(f"{API}/matches/nope/status", json={"status": "accepted"}, headers=headers("w-1"))
    assert missing.status_code == 404
    assert missing.json() == {"error": "Match not found"}

    assert client.get(f"{API}/matches", headers=headers("w-1")).json()[0]["status"] == "pending"


def test_offer_lifecycle_keeps_matches_after_delete(client, headers):
    setup_employer(client, headers)
    register(client, headers, "w-1", "worker")
    register(client, headers, "w-2", "worker")
    publish_worker(client, headers, "w-1")
    publish_worker(client, headers, "w-2", puesto="Mozo")

    created = publish_offer(client, headers, "emp-1").json()
    offer_id = created["id"]
    assert created["new_matches"] == 1

    assert client.patch(f"{API}/job-offers/{offer_id}", json={"salary": "$ 1"}, headers=headers("w-1")).status_code == 403

    edited = client.patch(f"{API}/job-offers/{offer_id}", json={"puesto": "Mozo"}, headers=headers("emp-1")).json()
    assert edited["updates"]["puesto"] == "Mozo"
    assert [m["worker_id"] for m in edited["matches"]] == ["w-2"]

    mine = client.get(f"{API}/job-offers/mine", headers=headers("emp-1")).json()
    assert [o["puesto"] for o in mine] == ["Mozo"]

    assert client.delete(f"{API}/job-offers/{offer_id}", headers=headers("emp-1")).status_code == 200
    assert client.delete(f"{API}/job-offers/{offer_id}", headers=headers("emp-1")).status_code == 404

    remaining = client.get(f"{API}/matches", headers=headers("w-1")).json()
    assert len(remaining) == 1
    assert remaining[0]["offer_id"] == offer_id
    assert remaining[0]["puesto"] == "Cocinero"
    assert "job_offer" not in remaining[0]


def test_worker_status_toggle(client, headers):
    register(client, headers, "w-1", "worker")
    assert client.patch(f"{API}/workers/status", json={"active": False}, headers=headers("w-1")).status_code == 404

    publish_worker(client, headers, "w-1")
    hidden = client.patch(f"{API}/workers/status", json={"active": False}, headers=headers("w-1"))
    assert hidden.json()["active"] is False

    setup_employer(client, headers)
    assert publish_offer(client, headers, "emp-1").json()["new_matches"] == 0

    shown = client.patch(f"{API}/workers/status", json={"active": True}, headers=headers("w-1")).json()
    assert shown["new_matches"] == 1
    assert client.get(f"{API}/workers/me", headers=headers("w-1")).json()["active"] is True


def test_me_returns_profile_of_effective_role(client, headers):
    register(client, headers, "w-1", "worker")
    assert client.get(f"{API}/auth/me", headers=headers("w-1")).json()["profile"] is None

    publish_worker(client, headers, "w-1")
    me = client.get(f"{API}/auth/me", headers=headers("w-1")).json()
    assert me["user"]["role"] == "worker"
    assert me["user"]["email"] == "w-1@example.com"
    assert me["profile"]["puesto"] == "Cocinero"

    assert client.get(f"{API}/auth/me", headers=headers("ghost")).status_code == 404


async def test_admin_endpoints_require_superuser(client, headers, seed):
    await seed.user("root", UserRole.SUPERUSER)
    await seed.employer("emp-1")
    await seed.offer("emp-1")
    await seed.worker("w-1")

    assert client.get(f"{API}/admin/stats", headers=headers("w-1")).status_code == 403

    stats = client.get(f"{API}/admin/stats", headers=headers("root")).json()
    assert stats["users_by_role"]["superuser"] == 1
    assert stats["active_job_offers"] == 1

    workers = client.get(f"{API}/admin/users?role=worker", headers=headers("root")).json()
    assert [u["uid"] for u in workers["users"]] == ["w-1"]

    disabled = client.patch(f"{API}/admin/users/w-1", json={"disabled": True}, headers=headers("root"))
    assert disabled.json()["user"]["disabled"] is True
    assert client.get(f"{API}/matches", headers=headers("w-1")).status_code == 403

    assert client.delete(f"{API}/admin/users/root?hard=true", headers=headers("root")).status_code == 403
    deleted = client.delete(f"{API}/admin/users/emp-1?hard=true", headers=headers("root"))
    assert deleted.json() == {"message": "User permanently deleted"}
    assert client.get(f"{API}/admin/users/emp-1", headers=headers("root")).status_code == 404


async def test_disabled_accounts_cannot_act(client, headers, seed, repository):
    await seed.employer("emp-1")
    offer = await seed.offer("emp-1")
    register(client, headers, "w-1", "worker")
    match_id = publish_worker(client, headers, "w-1").json()["matches"][0]["id"]
    chat_id = client.post(f"{API}/chats/{match_id}", headers=headers("w-1")).json()["id"]

    for uid in ("w-1", "emp-1"):
        account = await repository.get_user(uid)
        await repository.save_user(account.model_copy(update={"disabled": True}))

    calls = [
        client.patch(f"{API}/matches/{match_id}/status", json={"status": "accepted"}, headers=headers("w-1")),
        client.post(f"{API}/chats/{match_id}", headers=headers("emp-1")),
        client.post(f"{API}/chats/{chat_id}/messages", json={"text": "hola"}, headers=headers("w-1")),
        client.get(f"{API}/chats/{chat_id}/messages", headers=headers("w-1")),
        client.patch(f"{API}/job-offers/{offer.id}", json={"salary": "$ 1"}, headers=headers("emp-1")),
        client.delete(f"{API}/job-offers/{offer.id}", headers=headers("emp-1")),
        client.patch(f"{API}/workers/status", json={"active": False}, headers=headers("w-1")),
    ]

    assert [response.status_code for response in calls] == [403] * len(calls)
    assert (await repository.get_match(match_id)).status.value == "pending"
    assert await repository.get_job_offer(offer.id) is not None
    assert repository.messages == []
