#######################################################
# Command registrar - pushes slash command schemas on ready
#######################################################
import logging

import discord

from visa_bot.core.errors import RegistrationError


async def register_commands(bot) -> int:
    """Replace the bot's registered slash commands with the ones currently loaded.
    Returns:
        int: The number of top-level commands pushed.
    Raises:
        RegistrationError: if Discord rejects the sync.
    """
    logging.info('Started refreshing application (/) commands.')
    try:
        await bot.sync_commands(force=True, delete_existing=True)
    except (discord.HTTPException, discord.ClientException) as e:
        raise RegistrationError(f"Failed to sync slash commands: {e}") from e
    names = [cmd.name for cmd in bot.pending_application_commands]
    logging.info('Successfully reloaded application (/) commands: %s', ", ".join(names))
    return len(names)
