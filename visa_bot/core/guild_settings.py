#######################################################
# Per-guild settings context (log / response channels)
#######################################################
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from visa_bot.core.database import VisaDatabase


@dataclass
class GuildSettings:
    guild_id: int
    log_channel_id: Optional[int] = None
    response_channel_id: Optional[int] = None


class GuildSettingsStore:
    """In-memory copy of every guild's channel settings, backed by the settings table.

    Records are loaded once at startup and refreshed only by the set-commands, so
    handlers never need a database round-trip to find their channels. Guilds without
    a record fall back to the default channels from the configuration.
    """

    def __init__(self, db: VisaDatabase, default_log_channel_id: Optional[int] = None,
                 default_response_channel_id: Optional[int] = None):
        self.db = db
        self.default_log_channel_id = default_log_channel_id
        self.default_response_channel_id = default_response_channel_id
        self._cache: Dict[int, GuildSettings] = {}

    def load(self) -> int:
        """Populate the cache from the database. Returns the number of guild records loaded."""
        self._cache.clear()
        for record in self.db.get_all_settings():
            self._cache[record['guild_id']] = GuildSettings(
                guild_id=record['guild_id'],
                log_channel_id=record['log_channel_id'] or self.default_log_channel_id,
                response_channel_id=record['response_channel_id'] or self.default_response_channel_id,
            )
        logging.info("Loaded settings for %d guild(s)", len(self._cache))
        return len(self._cache)

    def get(self, guild_id: int) -> GuildSettings:
        """Return the settings context for a guild, creating a default one if none is cached."""
        settings = self._cache.get(guild_id)
        if settings is None:
            settings = GuildSettings(
                guild_id=guild_id,
                log_channel_id=self.default_log_channel_id,
                response_channel_id=self.default_response_channel_id,
            )
            self._cache[guild_id] = settings
        return settings

    def set_log_channel(self, guild_id: int, channel_id: int) -> GuildSettings:
        self.db.set_log_channel(guild_id, channel_id)
        settings = self.get(guild_id)
        settings.log_channel_id = channel_id
        return settings

    def set_response_channel(self, guild_id: int, channel_id: int) -> GuildSettings:
        self.db.set_response_channel(guild_id, channel_id)
        settings = self.get(guild_id)
        settings.response_channel_id = channel_id
        return settings
