"""Organization and membership administration for ImpactCRM.

Commands:
    add-org        Create an organization
    list-orgs      List organizations
    add-member     Link a user id to an organization
    remove-member  Remove a user's membership
    list-members   List the members of an organization
"""

import argparse
import asyncio
import sys

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo.errors import DuplicateKeyError

from impactcrm.database import close_db, init_db
from impactcrm.models.organization import MemberRole, Membership, Organization


async def add_org(name: str, email_domain: str | None = None) -> int:
    """Create an organization and print its id."""
    if email_domain:
        email_domain = email_domain.lower().lstrip("@")
        existing = await Organization.find_one(Organization.email_domain == email_domain)
        if existing:
            print(f"Error: Domain '{email_domain}' already belongs to '{existing.name}'.")
            return 1

    org = Organization(name=name, email_domain=email_domain)
    await org.insert()
    print(f"Organization '{name}' created with id {org.id}")
    return 0


async def list_orgs() -> int:
    """List all organizations."""
    orgs = await Organization.find_all().sort(Organization.name).to_list()
    if not orgs:
        print("No organizations found.")
        return 0

    print(f"{'Id':<26} {'Name':<30} {'Domain':<25}")
    print("-" * 81)
    for org in orgs:
        print(f"{str(org.id):<26} {org.name:<30} {org.email_domain or '-':<25}")
    return 0


async def _get_org(organization_id: str) -> Organization | None:
    try:
        return await Organization.get(PydanticObjectId(organization_id))
    except InvalidId:
        return None


async def add_member(user_id: str, organization_id: str, role: MemberRole) -> int:
    """Link a user to an organization; a user belongs to at most one."""
    org = await _get_org(organization_id)
    if org is None:
        print(f"Error: Organization '{organization_id}' not found.")
        return 1

    try:
        await Membership(user_id=user_id, organization_id=str(org.id), role=role).insert()
    except DuplicateKeyError:
        print(f"Error: User '{user_id}' already belongs to an organization.")
        return 1

    print(f"User '{user_id}' added to '{org.name}' as {role.value}.")
    return 0


async def remove_member(user_id: str) -> int:
    """Remove a user's membership."""
    membership = await Membership.find_one(Membership.user_id == user_id)
    if membership is None:
        print(f"Error: User '{user_id}' has no membership.")
        return 1
    await membership.delete()
    print(f"Membership of '{user_id}' removed.")
    return 0


async def list_members(organization_id: str) -> int:
    """List the members of one organization."""
    members = await Membership.find(
        Membership.organization_id == organization_id
    ).sort(Membership.user_id).to_list()
    if not members:
        print("No members found.")
        return 0

    print(f"{'User id':<40} {'Role':<8}")
    print("-" * 49)
    for member in members:
        print(f"{member.user_id:<40} {member.role.value:<8}")
    return 0


async def run(args: argparse.Namespace) -> int:
    await init_db()
    try:
        if args.command == "add-org":
            return await add_org(args.name, args.domain)
        if args.command == "list-orgs":
            return await list_orgs()
        if args.command == "add-member":
            return await add_member(args.user_id, args.organization_id, MemberRole(args.role))
        if args.command == "remove-member":
            return await remove_member(args.user_id)
        return await list_members(args.organization_id)
    finally:
        await close_db()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Organization administration for ImpactCRM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_org_parser = subparsers.add_parser("add-org", help="Create an organization")
    add_org_parser.add_argument("name", help="Organization name")
    add_org_parser.add_argument("--domain", "-d", help="Email domain of the organization")

    subparsers.add_parser("list-orgs", help="List organizations")

    add_member_parser = subparsers.add_parser("add-member", help="Add a user to an organization")
    add_member_parser.add_argument("user_id", help="Identity-provider user id")
    add_member_parser.add_argument("organization_id", help="Organization id")
    add_member_parser.add_argument(
        "--role", "-r",
        choices=[role.value for role in MemberRole],
        default=MemberRole.MEMBER.value,
        help="Role inside the organization",
    )

    remove_parser = subparsers.add_parser("remove-member", help="Remove a user's membership")
    remove_parser.add_argument("user_id", help="Identity-provider user id")

    list_members_parser = subparsers.add_parser("list-members", help="List organization members")
    list_members_parser.add_argument("organization_id", help="Organization id")

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
