# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for admin operations."""

import pytest

from expertchat.domains.access.service import AccessGuard
from expertchat.domains.admin.service import AdminService
from expertchat.domains.errors import (
    AdminRequiredError,
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from expertchat.domains.moderation.service import ModerationPipeline
from expertchat.models.user import UserUpdateRequest


class TestRequireAdmin:
    """Tests for AdminService.require_admin."""

    @pytest.mark.asyncio
    async def test_admin_passes(self, db, make_user) -> None:
        """Test that an admin identity resolves."""
        await make_user("root@example.com", is_admin=True)

        admin = await AdminService(db).require_admin("root@example.com")

        assert admin.email == "root@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", [None, "", "ghost@example.com", "amy@example.com", "banned-root@example.com"])
    async def test_non_admins_are_refused(self, db, make_user, email) -> None:
        """Test missing, unknown, regular and banned identities."""
        await make_user("amy@example.com")
        await make_user("banned-root@example.com", is_admin=True, is_banned=True)

        with pytest.raises(AdminRequiredError) as exc_info:
            await AdminService(db).require_admin(email)

        assert exc_info.value.code == "admin access required"


class TestUsers:
    """Tests for user administration."""

    @pytest.mark.asyncio
    async def test_list_users_in_registration_order(self, db, make_user) -> None:
        """Test the user listing."""
        await make_user("b@example.com")
        await make_user("a@example.com")

        result = await AdminService(db).list_users()

        assert result.total == 2
        assert [u.email for u in result.users] == ["b@example.com", "a@example.com"]

    @pytest.mark.asyncio
    async def test_update_user_fields(self, db, make_user) -> None:
        """Test editing name, admin flag and expertise."""
        user = await make_user("vera@example.com", expertise=["geology", "lava"])

        updated = await AdminService(db).update_user(
            user.id,
            UserUpdateRequest(name="Vera V", is_admin=True, expertise=["Lava", "Volcanology"]),
        )

        assert updated.name == "Vera V"
        assert updated.is_admin is True
        assert updated.expertise == ["lava", "volcanology"]
        assert updated.email == "vera@example.com"

    @pytest.mark.asyncio
    async def test_update_email_clash_conflicts(self, db, make_user) -> None:
        """Test that an email cannot be moved onto another user."""
        await make_user("amy@example.com")
        vera = await make_user("vera@example.com")

        with pytest.raises(ConflictError):
            await AdminService(db).update_user(vera.id, UserUpdateRequest(email="amy@example.com"))

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db) -> None:
        """Test the not-found case."""
        with pytest.raises(NotFoundError):
            await AdminService(db).update_user(999, UserUpdateRequest(name="x"))

    @pytest.mark.asyncio
    async def test_identity_ban_round_trip(self, db, make_user) -> None:
        """Test banning and unbanning an identity."""
        await make_user("troll@example.com")
        service = AdminService(db)

        banned = await service.set_identity_ban("troll@example.com", True)
        assert banned.is_banned is True
        assert banned.banned_at is not None
        assert await AccessGuard(db).is_identity_banned("troll@example.com") is True

        unbanned = await service.set_identity_ban("troll@example.com", False)
        assert unbanned.is_banned is False
        assert unbanned.banned_at is None

    @pytest.mark.asyncio
    async def test_ban_unknown_identity(self, db) -> None:
        """Test banning an email nobody registered."""
        with pytest.raises(NotFoundError):
            await AdminService(db).set_identity_ban("ghost@example.com", True)


class TestAddresses:
    """Tests for address bans."""

    @pytest.mark.asyncio
    async def test_ban_is_idempotent_and_normalized(self, db) -> None:
        """Test that the same address is stored once."""
        service = AdminService(db)

        first = await service.ban_address("::ffff:203.0.113.7", reason="spam", banned_by="root@example.com")
        second = await service.ban_address("203.0.113.7", reason="again")

        assert first.id == second.id
        assert first.address == "203.0.113.7"
        assert second.reason == "spam"
        assert (await service.list_addresses()).total == 1

    @pytest.mark.asyncio
    async def test_unban(self, db) -> None:
        """Test removing an address ban."""
        service = AdminService(db)
        await service.ban_address("203.0.113.7")

        await service.unban_address("203.0.113.7")

        assert await AccessGuard(db).is_address_banned("203.0.113.7") is False
        with pytest.raises(NotFoundError):
            await service.unban_address("203.0.113.7")

    @pytest.mark.asyncio
    async def test_blank_address_is_rejected(self, db) -> None:
        """Test validation of the address."""
        with pytest.raises(InvalidInputError):
            await AdminService(db).ban_address("   ")


class TestReview:
    """Tests for moderation and chat review."""

    @pytest.mark.asyncio
    async def test_list_records_newest_first_and_filtered(self, db, redactor) -> None:
        """Test paging and session filtering of records."""
        pipeline = ModerationPipeline(db, redactor)
        await pipeline.submit("a", "amy@example.com", "idiot")
        await pipeline.submit("b", "bob@example.com", "moron")
        await pipeline.submit("a", "amy@example.com", "clean")
        service = AdminService(db)

        everything = await service.list_records()
        only_a = await service.list_records(session_id="a")
        paged = await service.list_records(limit=1, offset=1)

        assert everything.total == 2
        assert [r.session_id for r in everything.records] == ["b", "a"]
        assert only_a.total == 1
        assert only_a.records[0].offending_token == "idiot"
        assert paged.total == 2
        assert [r.session_id for r in paged.records] == ["a"]

    @pytest.mark.asyncio
    async def test_list_chats(self, db, redactor) -> None:
        """Test the transcript listing."""
        pipeline = ModerationPipeline(db, redactor)
        await pipeline.submit("a", "amy@example.com", "hello")
        await pipeline.submit("a", "vera@example.com", "hi amy")

        result = await AdminService(db).list_chats()

        assert result.total == 1
        assert [m.text for m in result.chats[0].messages] == ["hello", "hi amy"]
