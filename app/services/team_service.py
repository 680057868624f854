import logging
from typing import List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.errors import NotFoundError, PersistenceError, ValidationError
from app.models.team_member import TeamMember
from app.schemas.team import TeamMemberCreate, TeamMemberListResponse, TeamMemberResponse

logger = logging.getLogger(__name__)


class TeamService:
    @staticmethod
    def to_response(member: TeamMember) -> TeamMemberResponse:
        return TeamMemberResponse(
            id=str(member.id),
            name=member.name,
            email=member.email,
            role=member.role,
            createdAt=member.createdAt
        )

    @staticmethod
    async def list_members() -> TeamMemberListResponse:
        """Get all team members ordered by name"""
        members = await TeamMember.find_all().sort([("name", 1)]).to_list()
        return TeamMemberListResponse(
            members=[TeamService.to_response(member) for member in members],
            total=len(members)
        )

    @staticmethod
    async def list_emails() -> List[str]:
        """Email addresses of every team member, for notification fan-out"""
        try:
            members = await TeamMember.find_all().to_list()
        except PyMongoError as e:
            raise PersistenceError(f"Could not load team members: {e}") from e
        return [member.email for member in members if member.email]

    @staticmethod
    async def add_member(member_data: TeamMemberCreate) -> TeamMemberResponse:
        """Add a team member; emails are unique"""
        email = str(member_data.email).strip()
        existing = await TeamMember.find_one(TeamMember.email == email)
        if existing:
            raise ValidationError("Team member with this email already exists")

        member = TeamMember(
            name=member_data.name.strip(),
            email=email,
            role=member_data.role
        )
        try:
            await member.insert()
        except DuplicateKeyError:
            raise ValidationError("Team member with this email already exists")

        logger.info(f"Team member added: {member.id}")
        return TeamService.to_response(member)

    @staticmethod
    async def remove_member(member_id: str) -> None:
        """Remove a team member by id"""
        try:
            member = await TeamMember.get(ObjectId(member_id))
        except InvalidId:
            member = None
        if not member:
            raise NotFoundError("Team member not found")

        await member.delete()
        logger.info(f"Team member removed: {member_id}")
