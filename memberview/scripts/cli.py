"""
A simple CLI for reading group memberships from a configured database.
"""

import asyncio
import sys

import structlog

USAGE = "Only supported commands are memberview list, or memberview get {group_id} {user_id}"


async def run_list() -> str:
    from memberview.config.settings import Settings
    from memberview.service import group_members as group_members_service

    settings = Settings()
    manager = settings.async_manager()
    log = structlog.get_logger()

    try:
        async with manager.session() as conn:
            members = await group_members_service.read_group_members(
                conn=conn, log=log, staleness=settings.snapshot_staleness
            )
    finally:
        await manager.dispose()

    return members.model_dump_json(indent=2)


async def run_get(group_id: str, user_id: str) -> str:
    from memberview.config.settings import Settings
    from memberview.service import group_members as group_members_service

    settings = Settings()
    manager = settings.async_manager()
    log = structlog.get_logger()

    try:
        async with manager.session() as conn:
            member = await group_members_service.read_group_member(
                group_id=group_id,
                user_id=user_id,
                conn=conn,
                log=log,
                staleness=settings.snapshot_staleness,
            )
    finally:
        await manager.dispose()

    return member.model_dump_json(indent=2)


def main():
    try:
        command = sys.argv[1]
    except IndexError:
        print(USAGE)
        exit(1)

    if command == "list":
        print(asyncio.run(run_list()))
        exit(0)

    if command == "get":
        try:
            group_id = sys.argv[2]
            user_id = sys.argv[3]
        except IndexError:
            print(USAGE)
            exit(1)

        from memberview.service.group_members import GroupMemberNotFound

        try:
            print(asyncio.run(run_get(group_id=group_id, user_id=user_id)))
        except GroupMemberNotFound as e:
            print(e)
            exit(1)

        exit(0)

    print(USAGE)
    exit(1)
