# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API tests for question endpoints."""

import pytest

from expertchat.infrastructure.database.models import BannedAddress


class TestAskQuestion:
    """Tests for POST /api/v1/questions."""

    @pytest.mark.asyncio
    async def test_question_is_routed_to_expert(self, client, make_user, resolver) -> None:
        """Test routing through related terms."""
        await make_user("vera@example.com", expertise=["volcanology"])

        response = await client.post(
            "/api/v1/questions",
            json={"topic": "Volcanoes", "body": "Is Etna active?", "askedBy": "amy@example.com"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["assignedTo"] == "vera@example.com"
        assert body["askedBy"] == "amy@example.com"
        assert len(body["sessionId"]) == 32
        assert resolver.calls == ["Volcanoes"]

    @pytest.mark.asyncio
    async def test_unmatched_question_is_stored(self, client) -> None:
        """Test that no expert is a normal outcome."""
        response = await client.post(
            "/api/v1/questions",
            json={"topic": "knitting", "body": "Which needles?", "askedBy": "amy@example.com"},
        )

        assert response.status_code == 201
        assert response.json()["assignedTo"] is None

    @pytest.mark.asyncio
    async def test_banned_asker_is_refused(self, client, make_user) -> None:
        """Test identity bans on asking."""
        await make_user("troll@example.com", is_banned=True)

        response = await client.post(
            "/api/v1/questions",
            json={"topic": "volcanoes", "body": "?", "askedBy": "troll@example.com"},
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "banned"

    @pytest.mark.asyncio
    async def test_banned_address_is_refused(self, client, db, client_address, resolver) -> None:
        """Test address bans on asking, before any lookup happens."""
        db.add(BannedAddress(address=client_address))
        await db.commit()

        response = await client.post(
            "/api/v1/questions",
            json={"topic": "volcanoes", "body": "?", "askedBy": "amy@example.com"},
        )

        assert response.status_code == 403
        assert resolver.calls == []

    @pytest.mark.asyncio
    async def test_blank_topic_is_rejected(self, client) -> None:
        """Test request validation."""
        response = await client.post(
            "/api/v1/questions",
            json={"topic": "   ", "body": "?", "askedBy": "amy@example.com"},
        )

        assert response.status_code == 422


class TestReadQuestions:
    """Tests for the question read endpoints."""

    @pytest.mark.asyncio
    async def test_get_by_session(self, client) -> None:
        """Test looking up the question behind a chat."""
        created = await client.post(
            "/api/v1/questions",
            json={"topic": "volcanoes", "body": "Is Etna active?", "askedBy": "amy@example.com"},
        )
        session_id = created.json()["sessionId"]

        response = await client.get(f"/api/v1/questions/{session_id}")

        assert response.status_code == 200
        assert response.json()["body"] == "Is Etna active?"

    @pytest.mark.asyncio
    async def test_get_unknown_session(self, client) -> None:
        """Test the not-found case."""
        response = await client.get("/api/v1/questions/missing")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_list_for_identity(self, client, make_user) -> None:
        """Test listing questions for a participant."""
        await make_user("amy@example.com")
        await client.post(
            "/api/v1/questions",
            json={"topic": "volcanoes", "body": "one", "askedBy": "amy@example.com"},
        )
        await client.post(
            "/api/v1/questions",
            json={"topic": "volcanoes", "body": "two", "askedBy": "bob@example.com"},
        )

        response = await client.get("/api/v1/questions", params={"email": "amy@example.com"})

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["questions"][0]["body"] == "one"

    @pytest.mark.asyncio
    async def test_list_for_unknown_identity(self, client) -> None:
        """Test listing for an unregistered email."""
        response = await client.get("/api/v1/questions", params={"email": "ghost@example.com"})

        assert response.status_code == 404
