#######################################################
# Error types and the top-level command error reply
#######################################################
import logging
import traceback

import discord
from discord.ext import commands


class AuthorizationDenied(commands.CheckFailure):
    """Raised by the role check when the invoker holds none of the allowed roles."""

    def __init__(self, message: str = "You do not have permission to use this command."):
        super().__init__(message)


class RoleAssignmentError(Exception):
    """The applicant could not be given the role (not a member, or the bot lacks permission)."""


class DeliveryError(Exception):
    """A DM or channel post could not be delivered."""


class DmBlockedError(DeliveryError):
    """The applicant does not accept direct messages from the bot."""


class PersistenceError(Exception):
    """The database could not be reached or rejected a write."""


class RegistrationError(Exception):
    """Pushing the slash command schemas to Discord failed."""


GENERIC_FAILURE = "There was an error while handling your command!"


async def report_command_error(ctx, error: Exception) -> None:
    """Send exactly one ephemeral reply for an error that escaped a command.

    Authorization failures show their own message; anything else is logged with
    its traceback and answered with a generic failure message.
    """
    # Unwrap ApplicationCommandInvokeError to get the original exception
    if isinstance(error, discord.ApplicationCommandInvokeError) and getattr(error, "original", None):
        error = error.original

    if isinstance(error, (commands.CheckFailure, discord.CheckFailure)):
        content = str(error) or AuthorizationDenied().args[0]
        logging.info("Denied %s for %s", getattr(ctx.command, "qualified_name", "command"), getattr(ctx.author, "id", None))
    else:
        tb = "".join(traceback.format_exception(type(error), error, getattr(error, "__traceback__", None)))
        logging.error("Error handling interaction: %s\n%s", error, tb)
        content = GENERIC_FAILURE

    try:
        await ctx.respond(content=content, ephemeral=True)
    except Exception as e:
        logging.exception(f"Failed to send error reply: {e}")
