#######################################################
# Permission management functions
#######################################################
from __future__ import annotations

import logging
from typing import Iterable, Union

from discord.ext import commands

from visa_bot.core.errors import AuthorizationDenied


def member_role_ids(member) -> set[int]:
    """Return the IDs of the member's roles, or an empty set for objects without roles (e.g. a plain User in DMs)."""
    return {r.id for r in getattr(member, "roles", None) or []}


def member_has_allowed_role(member, allowed_role_ids: Iterable[Union[str, int]]) -> bool:
    """Return True if the member holds any role in `allowed_role_ids`.

    This expects `member.roles` to be an iterable of role-like objects with an `id` attribute.
    An empty allow-list denies everyone.
    """
    allowed = {int(r) for r in allowed_role_ids}
    held = member_role_ids(member)
    logging.debug("member_role_ids=%s allowed_role_ids=%s", held, allowed)
    return bool(held.intersection(allowed))


def has_allowed_role():
    """Return a check that the invoking member holds one of the configured allowed roles.

    The allow-list is read from `ctx.bot.config.allowed_role_ids` on every invocation.
    Use as:
        @has_allowed_role()
        @group.command(...)
        async def some_command(self, ctx, ...):
            ...
    """
    async def predicate(ctx):
        author = getattr(ctx, "author", None)
        if author is None or getattr(ctx, "guild", None) is None:
            raise AuthorizationDenied()
        if member_has_allowed_role(author, ctx.bot.config.allowed_role_ids):
            return True
        raise AuthorizationDenied()

    return commands.check(predicate)
