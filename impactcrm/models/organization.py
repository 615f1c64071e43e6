"""Organization and membership documents defining tenant boundaries."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field


class MemberRole(str, Enum):
    """Role of a user inside an organization."""

    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class Organization(Document):
    """A tenant. Every CRM record belongs to exactly one organization."""

    name: str
    # Unique across organizations; checked by impactcrm-admin add-org
    email_domain: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "organizations"


class Membership(Document):
    """Links an identity-provider user id to its organization."""

    user_id: Indexed(str, unique=True)
    organization_id: Indexed(str)
    role: MemberRole = MemberRole.MEMBER
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Settings:
        name = "user_organizations"
