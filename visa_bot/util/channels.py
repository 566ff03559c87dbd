import logging
from typing import Optional

import discord


async def resolve_channel(bot, channel_id: Optional[int], guild_id: Optional[int] = None):
    """Look a channel up in the bot's cache, falling back to an API fetch.
    Parameters:
        bot: The bot client.
        channel_id (Optional[int]): The channel to resolve.
        guild_id (Optional[int]): When given, a channel belonging to another guild is treated as unresolvable.
    Returns:
        The channel, or None if no ID was given, Discord could not provide it, or it is in another guild.
    """
    if not channel_id:
        return None
    channel = bot.get_channel(channel_id)
    if channel is None:
        try:
            channel = await bot.fetch_channel(channel_id)
        except (discord.HTTPException, discord.InvalidData) as e:
            logging.warning("Could not fetch channel %s: %s", channel_id, e)
            return None

    owner = getattr(channel, "guild", None)
    if guild_id is not None and owner is not None and owner.id != guild_id:
        logging.warning("Channel %s belongs to guild %s, not guild %s; ignoring it.", channel_id, owner.id, guild_id)
        return None
    return channel
