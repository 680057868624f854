"""Tests for the team directory."""

import pytest
from bson import ObjectId

from app.errors import NotFoundError, ValidationError
from app.schemas.team import TeamMemberCreate
from app.services.team_service import TeamService


async def test_add_and_list_sorted_by_name(db):
    await TeamService.add_member(TeamMemberCreate(name="Zoe", email="zoe@acme.io", role="Sales"))
    await TeamService.add_member(TeamMemberCreate(name="Adam", email="adam@acme.io"))

    result = await TeamService.list_members()

    assert result.total == 2
    assert [member.name for member in result.members] == ["Adam", "Zoe"]
    assert result.members[1].role == "Sales"


async def test_duplicate_email_rejected(db):
    await TeamService.add_member(TeamMemberCreate(name="Zoe", email="zoe@acme.io"))

    with pytest.raises(ValidationError):
        await TeamService.add_member(TeamMemberCreate(name="Zoe Again", email="zoe@acme.io"))


async def test_list_emails(db):
    await TeamService.add_member(TeamMemberCreate(name="Zoe", email="zoe@acme.io"))

    assert await TeamService.list_emails() == ["zoe@acme.io"]


async def test_remove(db):
    member = await TeamService.add_member(TeamMemberCreate(name="Zoe", email="zoe@acme.io"))

    await TeamService.remove_member(member.id)

    assert (await TeamService.list_members()).total == 0


@pytest.mark.parametrize("member_id", ["bogus", str(ObjectId())])
async def test_remove_unknown(db, member_id):
    with pytest.raises(NotFoundError):
        await TeamService.remove_member(member_id)
