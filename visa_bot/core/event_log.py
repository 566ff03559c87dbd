#######################################################
# Event logger - audit notifications to the log channel
#######################################################
import datetime
import logging

import discord

from visa_bot.core.guild_settings import GuildSettings
from visa_bot.util.channels import resolve_channel

LOG_COLOUR = discord.Colour(0x3498DB)


class EventLogger:
    def __init__(self, bot):
        self.bot = bot

    async def log_event(self, settings: GuildSettings, title: str, description: str) -> bool:
        """Post a timestamped audit embed to the guild's log channel.

        Best effort: an unset log channel is a no-op, and an unresolvable channel or a
        failed send is logged locally and never raised.
        Returns:
            bool: True if the entry was delivered.
        """
        if not settings.log_channel_id:
            return False
        channel = await resolve_channel(self.bot, settings.log_channel_id, settings.guild_id)
        if channel is None:
            logging.error("Log channel %s not found for guild %s.", settings.log_channel_id, settings.guild_id)
            return False

        embed = discord.Embed(
            title=title,
            description=description,
            colour=LOG_COLOUR,
            timestamp=datetime.datetime.now(datetime.timezone.utc)
        )
        try:
            await channel.send(embed=embed)
        except discord.HTTPException as e:
            logging.error("Failed to send log entry '%s' to channel %s: %s", title, settings.log_channel_id, e)
            return False
        return True
