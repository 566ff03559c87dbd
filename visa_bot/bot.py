#######################################################
# Bot module - Main entry point for the bot.
#######################################################
import os
import logging
import sys

import asyncio
import discord
from discord.ext import commands

# Put the directory above visa_bot/ on sys.path so `python visa_bot/bot.py` from a source checkout
# can import `visa_bot.*` without installing the package first.
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from visa_bot.core.config import BotConfig, load_config
from visa_bot.core.database import VisaDatabase
from visa_bot.core.errors import RegistrationError, report_command_error
from visa_bot.core.event_log import EventLogger
from visa_bot.core.guild_settings import GuildSettingsStore
from visa_bot.core.registrar import register_commands
from visa_bot.core.workflow import ApplicationWorkflow

# Ensure an asyncio event loop is available (fixes "There is no current event loop in thread 'MainThread'" on newer Python)
try:
    # get_running_loop raises RuntimeError if there is no current loop
    asyncio.get_running_loop()
except RuntimeError:
    asyncio.set_event_loop(asyncio.new_event_loop())

# Set up -> Bot client
intents = discord.Intents.default()
intents.members = True  # Required to resolve applicants and their roles
bot = commands.Bot(command_prefix='!', intents=intents)

EXTENSIONS = ['visa_bot.cogs.applications', 'visa_bot.cogs.config']


def attach_services(config: BotConfig) -> None:
    """Create the database, settings cache and workflow shared by every cog."""
    bot.config = config
    db = VisaDatabase(config.database_path)
    settings_store = GuildSettingsStore(db, config.log_channel_id, config.response_channel_id)
    settings_store.load()
    bot.workflow = ApplicationWorkflow(
        db, settings_store, EventLogger(bot), bot,
        accept_image_url=config.accept_image_url,
        reject_image_url=config.reject_image_url,
    )


# Load extensions (cogs)
def load_extensions():
    for ext in EXTENSIONS:
        bot.load_extension(ext)
    logging.info("Extensions loaded: " + ", ".join(EXTENSIONS))


# Event: on_ready - Called when the bot is online & ready
@bot.event
async def on_ready():
    logging.info(f'Logged in as {bot.user} (ID: {bot.user.id})')
    try:
        await register_commands(bot)
    except RegistrationError as e:
        logging.error(str(e))
    logging.info('------')


@bot.event
async def on_application_command_error(ctx: discord.ApplicationContext, error: discord.DiscordException) -> None:
    await report_command_error(ctx, error)


# Main entry point
if __name__ == '__main__':
    config = load_config()
    logging.basicConfig(level=config.log_level, format="%(asctime)s %(levelname)s %(message)s")
    attach_services(config)
    load_extensions()
    bot.run(config.token)
