#######################################################
# Configuration loader - reads static settings from the environment
#######################################################
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_DATABASE_PATH = "data/visa_bot.db"
DEFAULT_ACCEPT_IMAGE_URL = "https://media.discordapp.net/attachments/865619411770933288/1294375223361015849/rejected_visa.png"
DEFAULT_REJECT_IMAGE_URL = "https://media.discordapp.net/attachments/865619411770933288/1294375240289484952/rejected_visa_a.png"


@dataclass(frozen=True)
class BotConfig:
    token: str
    database_path: str = DEFAULT_DATABASE_PATH
    log_channel_id: Optional[int] = None
    response_channel_id: Optional[int] = None
    allowed_role_ids: FrozenSet[int] = field(default_factory=frozenset)
    accept_image_url: str = DEFAULT_ACCEPT_IMAGE_URL
    reject_image_url: str = DEFAULT_REJECT_IMAGE_URL
    log_level: str = "INFO"


def get_env_int(key: str) -> Optional[int]:
    """Return the variable as an int, or None when it is unset or blank."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValueError(f"Environment variable {key} must be a valid integer, got: {value}")


def get_env_int_list(key: str) -> list[int]:
    """Return a comma-separated variable as a list of ints."""
    value = os.getenv(key)
    if not value:
        return []
    try:
        return [int(rid.strip()) for rid in value.split(",") if rid.strip()]
    except ValueError:
        raise ValueError(f"Environment variable {key} must be comma-separated integers, got: {value}")


def load_config() -> BotConfig:
    """Load the bot configuration once at startup.
    Values come from the process environment, with a .env file in the working directory filling in anything unset.
    Raises:
        ValueError: if DISCORD_TOKEN is missing or a numeric variable is malformed.
    """
    load_dotenv(find_dotenv(usecwd=True))
    token = os.getenv("DISCORD_TOKEN")
    if not token:
        raise ValueError("DISCORD_TOKEN environment variable not set.")
    return BotConfig(
        token=token,
        database_path=os.getenv("DATABASE_PATH") or DEFAULT_DATABASE_PATH,
        log_channel_id=get_env_int("LOG_CHANNEL_ID"),
        response_channel_id=get_env_int("RESPONSE_CHANNEL_ID"),
        allowed_role_ids=frozenset(get_env_int_list("ALLOWED_ROLE_IDS")),
        accept_image_url=os.getenv("ACCEPT_IMAGE_URL") or DEFAULT_ACCEPT_IMAGE_URL,
        reject_image_url=os.getenv("REJECT_IMAGE_URL") or DEFAULT_REJECT_IMAGE_URL,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
