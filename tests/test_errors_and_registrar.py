from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace

import discord
import pytest

from discord_stubs import StubBot, StubContext, StubGuild, StubMember, http_error
from visa_bot.core.errors import AuthorizationDenied, GENERIC_FAILURE, RegistrationError, report_command_error
from visa_bot.core.registrar import register_commands


class RegistrarBot:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sync_calls: list[dict] = []
        self.pending_application_commands = [
            SimpleNamespace(name="apply"),
            SimpleNamespace(name="setlog"),
            SimpleNamespace(name="setresponse"),
        ]

    async def sync_commands(self, **kwargs) -> None:
        self.sync_calls.append(kwargs)
        if self.error is not None:
            raise self.error


def _ctx() -> StubContext:
    return StubContext(StubBot(), StubGuild(1), StubMember(5))


def test_authorization_denied_gets_its_own_ephemeral_message() -> None:
    ctx = _ctx()
    asyncio.run(report_command_error(ctx, AuthorizationDenied()))
    assert ctx.responses == [{"content": "You do not have permission to use this command.", "ephemeral": True}]


def test_invoke_error_is_unwrapped_and_logged(caplog) -> None:
    ctx = _ctx()
    wrapped = discord.ApplicationCommandInvokeError(RuntimeError("boom"))

    with caplog.at_level(logging.ERROR):
        asyncio.run(report_command_error(ctx, wrapped))

    assert ctx.responses == [{"content": GENERIC_FAILURE, "ephemeral": True}]
    assert "boom" in caplog.text


def test_failed_error_reply_is_logged_not_raised(caplog) -> None:
    ctx = _ctx()

    async def broken_respond(*args, **kwargs):
        raise http_error(discord.NotFound, 404, "Unknown interaction")

    ctx.respond = broken_respond
    with caplog.at_level(logging.ERROR):
        asyncio.run(report_command_error(ctx, RuntimeError("boom")))

    assert "Failed to send error reply" in caplog.text


def test_register_commands_replaces_existing_set() -> None:
    bot = RegistrarBot()

    assert asyncio.run(register_commands(bot)) == 3
    assert bot.sync_calls == [{"force": True, "delete_existing": True}]


def test_register_commands_failure_raises_registration_error() -> None:
    bot = RegistrarBot(error=http_error(discord.HTTPException, 500, "Internal Server Error"))

    with pytest.raises(RegistrationError):
        asyncio.run(register_commands(bot))
