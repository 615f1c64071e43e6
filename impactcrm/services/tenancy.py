"""Tenant context: who is importing, and on behalf of which organization."""

import logging
from dataclasses import dataclass

from impactcrm.exceptions import TenantResolutionError
from impactcrm.models.organization import MemberRole, Membership

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    """Identity of the current session.

    Passed explicitly into the import pipeline and record queries so that
    tenant scope never depends on ambient state.
    """

    organization_id: str
    user_id: str | None = None
    role: MemberRole = MemberRole.MEMBER

    def __post_init__(self) -> None:
        if not self.organization_id:
            raise TenantResolutionError("A tenant context requires an organization id")

    @property
    def can_write(self) -> bool:
        return self.role in (MemberRole.ADMIN, MemberRole.MEMBER)

    def stamp(self, record: dict, include_creator: bool = True) -> dict:
        """Return a copy of ``record`` carrying this tenant's ids.

        Any organization or creator id already present (for example a column
        smuggled in through an uploaded file) is overwritten.
        """
        stamped = dict(record)
        stamped["organization_id"] = self.organization_id
        if include_creator:
            stamped["user_id"] = self.user_id
        else:
            stamped.pop("user_id", None)
        return stamped


async def resolve_tenant(user_id: str) -> TenantContext:
    """Look up the organization membership of an identity-provider user.

    Raises:
        TenantResolutionError: If the user belongs to no organization.
    """
    membership = await Membership.find_one(Membership.user_id == user_id)
    if membership is None:
        logger.info("No organization membership for user %s", user_id)
        raise TenantResolutionError(f"User '{user_id}' is not a member of any organization")
    return TenantContext(
        organization_id=membership.organization_id,
        user_id=user_id,
        role=membership.role,
    )
