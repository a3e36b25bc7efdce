"""
ContactKeeper Backend — Contacts API Tests
============================================

What:  End-to-end tests for /api/contacts through the ASGI app.
How:   HTTPX AsyncClient + in-memory SQLite (see conftest.py).

What we test:
    ✅ Full create → update → foreign delete → delete → list scenario
    ✅ Owner injection in the request body is ignored
    ✅ Missing/empty name is rejected with zero writes
    ✅ Users only ever see their own contacts, newest first
    ✅ 404 before 401 for update and delete
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import delete, func, select

from contactkeeper.models.contact import Contact
from contactkeeper.models.user import User
from contactkeeper.security import create_access_token


async def _count_contacts(database) -> int:
    async with database.session() as session:
        return (await session.execute(select(func.count(Contact.id)))).scalar_one()


class TestContactScenario:
    """The create → update → delete lifecycle, as one user and an intruder."""

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, test_client, make_user):
        owner, owner_headers = await make_user("Owner")
        _, other_headers = await make_user("Other")

        # Create
        response = await test_client.post(
            "/api/contacts", json={"name": "Alice"}, headers=owner_headers,
        )
        assert response.status_code == 200
        created = response.json()
        assert created["owner"] == str(owner.id)
        assert created["name"] == "Alice"
        assert created["email"] is None
        assert created["phone"] is None
        assert created["type"] is None
        assert "createdAt" in created
        contact_id = created["id"]

        # Partial update
        response = await test_client.put(
            f"/api/contacts/{contact_id}", json={"phone": "555-1234"}, headers=owner_headers,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["name"] == "Alice"
        assert updated["phone"] == "555-1234"
        assert updated["id"] == contact_id

        # Delete as someone else
        response = await test_client.delete(f"/api/contacts/{contact_id}", headers=other_headers)
        assert response.status_code == 401
        assert response.json()["msg"] == "Not authorized"

        # Delete as owner
        response = await test_client.delete(f"/api/contacts/{contact_id}", headers=owner_headers)
        assert response.status_code == 200
        assert response.json() == {"msg": "Contact removed"}

        # Gone from the list
        response = await test_client.get("/api/contacts", headers=owner_headers)
        assert response.status_code == 200
        assert all(c["id"] != contact_id for c in response.json())


class TestCreateContact:

    @pytest.mark.asyncio
    async def test_owner_injection_is_ignored(self, test_client, make_user):
        owner, headers = await make_user()
        victim, _ = await make_user()

        response = await test_client.post(
            "/api/contacts",
            json={"name": "Bob", "owner": str(victim.id), "user": str(victim.id), "id": str(uuid.uuid4())},
            headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["owner"] == str(owner.id)

    @pytest.mark.asyncio
    async def test_all_fields_are_stored(self, test_client, make_user):
        _, headers = await make_user()

        response = await test_client.post(
            "/api/contacts",
            json={"name": "Carol", "email": "carol@example.com", "phone": "555-0199", "type": "professional"},
            headers=headers,
        )

        body = response.json()
        assert body["email"] == "carol@example.com"
        assert body["phone"] == "555-0199"
        assert body["type"] == "professional"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{}, {"name": ""}, {"name": "   "}, {"name": None, "email": "x@example.com"}])
    async def test_missing_or_empty_name_is_rejected(self, test_client, make_user, database, payload):
        _, headers = await make_user()

        response = await test_client.post("/api/contacts", json=payload, headers=headers)

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert any(e["param"] == "name" and e["msg"] == "Name is required" for e in errors)
        assert await _count_contacts(database) == 0

    @pytest.mark.asyncio
    async def test_malformed_json_is_rejected(self, test_client, make_user, database):
        _, headers = await make_user()

        response = await test_client.post(
            "/api/contacts",
            content=b"{not json",
            headers={**headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["errors"]
        assert await _count_contacts(database) == 0


class TestListContacts:

    @pytest.mark.asyncio
    async def test_list_is_empty_for_new_user(self, test_client, make_user):
        _, headers = await make_user()

        response = await test_client.get("/api/contacts", headers=headers)

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_list_never_includes_other_users_contacts(self, test_client, make_user):
        _, alice_headers = await make_user("Alice")
        bob, bob_headers = await make_user("Bob")

        await test_client.post("/api/contacts", json={"name": "Alice's friend"}, headers=alice_headers)
        await test_client.post("/api/contacts", json={"name": "Bob's friend"}, headers=bob_headers)

        response = await test_client.get("/api/contacts", headers=bob_headers)

        contacts = response.json()
        assert [c["name"] for c in contacts] == ["Bob's friend"]
        assert all(c["owner"] == str(bob.id) for c in contacts)

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, test_client, make_user, database):
        user, headers = await make_user()
        now = datetime.now(timezone.utc)
        async with database.session() as session:
            session.add_all([
                Contact(owner=user.id, name="oldest", created_at=now - timedelta(days=2)),
                Contact(owner=user.id, name="newest", created_at=now),
                Contact(owner=user.id, name="middle", created_at=now - timedelta(days=1)),
            ])
            await session.commit()

        response = await test_client.get("/api/contacts", headers=headers)

        assert [c["name"] for c in response.json()] == ["newest", "middle", "oldest"]

    @pytest.mark.asyncio
    async def test_created_contact_is_listed_first(self, test_client, make_user, database):
        user, headers = await make_user()
        async with database.session() as session:
            session.add(Contact(
                owner=user.id, name="earlier", created_at=datetime.now(timezone.utc) - timedelta(hours=1),
            ))
            await session.commit()

        created = (await test_client.post("/api/contacts", json={"name": "Dave"}, headers=headers)).json()
        response = await test_client.get("/api/contacts", headers=headers)

        assert response.json()[0]["id"] == created["id"]


class TestUpdateContact:

    @pytest.mark.asyncio
    async def test_update_nonexistent_is_not_found(self, test_client, make_user):
        _, headers = await make_user()

        response = await test_client.put(
            f"/api/contacts/{uuid.uuid4()}", json={"name": "X"}, headers=headers,
        )

        assert response.status_code == 404
        assert response.json() == {"msg": "Contact not found", "error": "not_found"}

    @pytest.mark.asyncio
    async def test_update_malformed_id_is_not_found(self, test_client, make_user):
        _, headers = await make_user()

        response = await test_client.put("/api/contacts/12345", json={"name": "X"}, headers=headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_update_other_users_contact_is_unauthorized(self, test_client, make_user):
        _, owner_headers = await make_user()
        _, other_headers = await make_user()
        contact = (await test_client.post("/api/contacts", json={"name": "Eve"}, headers=owner_headers)).json()

        response = await test_client.put(
            f"/api/contacts/{contact['id']}", json={"name": "Mallory"}, headers=other_headers,
        )

        assert response.status_code == 401
        assert response.json()["error"] == "not_authorized"
        listed = (await test_client.get("/api/contacts", headers=owner_headers)).json()
        assert listed[0]["name"] == "Eve"

    @pytest.mark.asyncio
    async def test_update_only_changes_supplied_fields(self, test_client, make_user):
        _, headers = await make_user()
        contact = (await test_client.post(
            "/api/contacts",
            json={"name": "Frank", "email": "frank@example.com", "phone": "1", "type": "personal"},
            headers=headers,
        )).json()

        response = await test_client.put(
            f"/api/contacts/{contact['id']}", json={"phone": "2"}, headers=headers,
        )

        body = response.json()
        assert body["phone"] == "2"
        assert body["name"] == "Frank"
        assert body["email"] == "frank@example.com"
        assert body["type"] == "personal"
        assert body["owner"] == contact["owner"]
        assert body["createdAt"] == contact["createdAt"]

    @pytest.mark.asyncio
    async def test_update_cannot_reassign_owner(self, test_client, make_user):
        _, headers = await make_user()
        other, _ = await make_user()
        contact = (await test_client.post("/api/contacts", json={"name": "Gina"}, headers=headers)).json()

        response = await test_client.put(
            f"/api/contacts/{contact['id']}", json={"owner": str(other.id), "type": "family"}, headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["owner"] == contact["owner"]
        assert response.json()["type"] == "family"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_blank_name_leaves_name_unchanged(self, test_client, make_user, name):
        _, headers = await make_user()
        contact = (await test_client.post("/api/contacts", json={"name": "Hank"}, headers=headers)).json()

        response = await test_client.put(
            f"/api/contacts/{contact['id']}", json={"name": name, "phone": "555"}, headers=headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Hank"
        assert response.json()["phone"] == "555"

    @pytest.mark.asyncio
    async def test_empty_name_on_nonexistent_is_not_found(self, test_client, make_user):
        _, headers = await make_user()

        response = await test_client.put(
            f"/api/contacts/{uuid.uuid4()}", json={"name": ""}, headers=headers,
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_null_name_on_other_users_contact_is_unauthorized(self, test_client, make_user):
        _, owner_headers = await make_user()
        _, other_headers = await make_user()
        contact = (await test_client.post("/api/contacts", json={"name": "Eve"}, headers=owner_headers)).json()

        response = await test_client.put(
            f"/api/contacts/{contact['id']}", json={"name": None}, headers=other_headers,
        )

        assert response.status_code == 401
        assert response.json()["error"] == "not_authorized"


class TestDeleteContact:

    @pytest.mark.asyncio
    async def test_delete_nonexistent_is_not_found_for_any_caller(self, test_client, make_user):
        _, headers = await make_user()

        response = await test_client.delete(f"/api/contacts/{uuid.uuid4()}", headers=headers)

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_removes_only_the_target(self, test_client, make_user, database):
        _, headers = await make_user()
        keep = (await test_client.post("/api/contacts", json={"name": "Keep"}, headers=headers)).json()
        drop = (await test_client.post("/api/contacts", json={"name": "Drop"}, headers=headers)).json()

        response = await test_client.delete(f"/api/contacts/{drop['id']}", headers=headers)

        assert response.status_code == 200
        listed = (await test_client.get("/api/contacts", headers=headers)).json()
        assert [c["id"] for c in listed] == [keep["id"]]
        assert await _count_contacts(database) == 1

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, test_client, make_user):
        _, headers = await make_user()
        contact = (await test_client.post("/api/contacts", json={"name": "Ivy"}, headers=headers)).json()

        await test_client.delete(f"/api/contacts/{contact['id']}", headers=headers)
        response = await test_client.delete(f"/api/contacts/{contact['id']}", headers=headers)

        assert response.status_code == 404


class TestContactsRequireAuthentication:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path", [
        ("GET", "/api/contacts"),
        ("POST", "/api/contacts"),
        ("PUT", f"/api/contacts/{uuid.uuid4()}"),
        ("DELETE", f"/api/contacts/{uuid.uuid4()}"),
    ])
    async def test_missing_token(self, test_client, method, path):
        response = await test_client.request(method, path, json={"name": "X"} if method in ("POST", "PUT") else None)

        assert response.status_code == 401
        assert response.json() == {"msg": "No token, authorization denied", "error": "not_authenticated"}

    @pytest.mark.asyncio
    async def test_invalid_token(self, test_client):
        response = await test_client.get("/api/contacts", headers={"x-auth-token": "garbage"})

        assert response.status_code == 401
        assert response.json()["msg"] == "Token is not valid"


class TestStoreFailures:

    @pytest.mark.asyncio
    async def test_uninitialized_database_is_server_error(self, make_user, database):
        from httpx import ASGITransport, AsyncClient

        from contactkeeper.database import Database
        from contactkeeper.main import create_app

        _, headers = await make_user()
        app = create_app(database=Database("sqlite+aiosqlite://"))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/api/contacts", headers=headers)

        assert response.status_code == 500
        assert response.json() == {"msg": "Server error", "error": "server_error"}

    @pytest.mark.asyncio
    async def test_contact_for_missing_owner_is_server_error(self, test_client, database):
        headers = {"x-auth-token": create_access_token(uuid.uuid4())}

        response = await test_client.post("/api/contacts", json={"name": "Ghost"}, headers=headers)

        assert response.status_code == 500
        assert await _count_contacts(database) == 0


class TestUserDeletion:

    @pytest.mark.asyncio
    async def test_deleting_user_removes_their_contacts(self, test_client, make_user, database):
        user, headers = await make_user()
        _, other_headers = await make_user()
        await test_client.post("/api/contacts", json={"name": "Ivy"}, headers=headers)
        await test_client.post("/api/contacts", json={"name": "Jack"}, headers=headers)
        await test_client.post("/api/contacts", json={"name": "Kim"}, headers=other_headers)

        async with database.session() as session:
            await session.execute(delete(User).where(User.id == user.id))
            await session.commit()

        assert await _count_contacts(database) == 1
        listed = (await test_client.get("/api/contacts", headers=other_headers)).json()
        assert [c["name"] for c in listed] == ["Kim"]
