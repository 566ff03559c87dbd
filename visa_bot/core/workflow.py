#######################################################
# Application workflow - accept / reject / status / channel settings
#######################################################
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import discord

from visa_bot.core.config import DEFAULT_ACCEPT_IMAGE_URL, DEFAULT_REJECT_IMAGE_URL
from visa_bot.core.database import VisaDatabase
from visa_bot.core.errors import DeliveryError, DmBlockedError, RoleAssignmentError
from visa_bot.core.event_log import EventLogger
from visa_bot.core.guild_settings import GuildSettings, GuildSettingsStore
from visa_bot.util.channels import resolve_channel

ROLE = 'role'
DM = 'dm'
LOG = 'log'
RESPONSE = 'response'

EFFECT_LABELS = {
    ROLE: "Role assignment",
    DM: "Direct message",
    LOG: "Log channel post",
    RESPONSE: "Response channel post",
}

ACCEPTED_COLOUR = discord.Colour(0x00FF00)
REJECTED_COLOUR = discord.Colour(0xFF0000)


@dataclass
class SideEffect:
    name: str
    ok: bool
    error: Optional[Exception] = None
    skipped: bool = False


@dataclass
class DecisionOutcome:
    """What happened while processing one accept/reject decision."""
    applicant_id: int
    status: str
    effects: List[SideEffect] = field(default_factory=list)

    def record(self, name: str, ok: bool, error: Optional[Exception] = None, skipped: bool = False) -> SideEffect:
        effect = SideEffect(name=name, ok=ok, error=error, skipped=skipped)
        self.effects.append(effect)
        return effect

    def effect(self, name: str) -> Optional[SideEffect]:
        for effect in self.effects:
            if effect.name == name:
                return effect
        return None

    @property
    def failures(self) -> List[SideEffect]:
        return [e for e in self.effects if not e.ok and not e.skipped]

    def confirmation(self) -> str:
        """The reply for the invoking moderator; optimistic, with any failed side effects listed below it."""
        verb = "accepted" if self.status == 'accepted' else "rejected"
        lines = [f"Application {verb} and the user has been notified!"]
        for failure in self.failures:
            label = EFFECT_LABELS.get(failure.name, failure.name)
            lines.append(f":warning: {label} failed: {failure.error or 'unknown error'}")
        return "\n".join(lines)


class ApplicationWorkflow:
    def __init__(self, db: VisaDatabase, settings_store: GuildSettingsStore, event_logger: EventLogger, bot,
                 accept_image_url: str = DEFAULT_ACCEPT_IMAGE_URL, reject_image_url: str = DEFAULT_REJECT_IMAGE_URL):
        self.db = db
        self.settings_store = settings_store
        self.event_logger = event_logger
        self.bot = bot
        self.accept_image_url = accept_image_url
        self.reject_image_url = reject_image_url

    # --- Decisions -------------------------------------------------------------
    async def accept(self, guild, executor, applicant, role, settings: GuildSettings) -> DecisionOutcome:
        """Accept an applicant: record it, grant `role`, notify them, log it and post to the response channel.

        Only the database write can fail the whole decision. Every later step is attempted
        independently and its result is kept on the returned outcome.
        """
        self.db.set_application_status(applicant.id, 'accepted')
        outcome = DecisionOutcome(applicant_id=applicant.id, status='accepted')
        await self._assign_role(guild, executor, applicant, role, outcome)
        await self._notify(guild, executor, applicant, settings, outcome)
        return outcome

    async def reject(self, guild, executor, applicant, settings: GuildSettings) -> DecisionOutcome:
        """Reject an applicant. Same as accept without the role grant; no reason is ever shown."""
        self.db.set_application_status(applicant.id, 'rejected')
        outcome = DecisionOutcome(applicant_id=applicant.id, status='rejected')
        await self._notify(guild, executor, applicant, settings, outcome)
        return outcome

    def status(self, user_id: int) -> Dict | None:
        return self.db.get_application(user_id)

    # --- Channel settings ------------------------------------------------------
    def settings_for(self, guild_id: int) -> GuildSettings:
        return self.settings_store.get(guild_id)

    def set_log_channel(self, guild_id: int, channel_id: int) -> GuildSettings:
        logging.info("Log channel for guild %s set to %s", guild_id, channel_id)
        return self.settings_store.set_log_channel(guild_id, channel_id)

    def set_response_channel(self, guild_id: int, channel_id: int) -> GuildSettings:
        logging.info("Response channel for guild %s set to %s", guild_id, channel_id)
        return self.settings_store.set_response_channel(guild_id, channel_id)

    # --- Notification ----------------------------------------------------------
    def build_notification(self, guild, applicant, accepted: bool) -> discord.Embed:
        if accepted:
            embed = discord.Embed(
                title="__Application Accepted__",
                description="__Status:__ Accepted\n\n__Details:__ Your visa application has been approved.\n\n",
                colour=ACCEPTED_COLOUR
            )
            embed.set_image(url=self.accept_image_url)
            footer = "Congratulations!"
        else:
            embed = discord.Embed(
                title="__Application Rejected__",
                description="**__Status__:** Rejected\n\n**__Details__:** Your Visa Application has been rejected. Please check the website for more info.\n\n",
                colour=REJECTED_COLOUR
            )
            embed.set_image(url=self.reject_image_url)
            footer = "Thank you for your interest in our server."

        # icon_url is only passed when there is an icon; None would be sent as the string "None"
        bot_user = getattr(self.bot, "user", None)
        if bot_user:
            embed.set_footer(text=footer, icon_url=bot_user.display_avatar.url)
        else:
            embed.set_footer(text=footer)
        embed.set_thumbnail(url=applicant.display_avatar.url)
        if guild.icon:
            embed.set_author(name=guild.name, icon_url=guild.icon.url)
        else:
            embed.set_author(name=guild.name)
        return embed

    async def _notify(self, guild, executor, applicant, settings: GuildSettings, outcome: DecisionOutcome) -> None:
        accepted = outcome.status == 'accepted'
        embed = self.build_notification(guild, applicant, accepted)
        verb = "accepted" if accepted else "rejected"
        content = f"<@{applicant.id}>, your application has been {verb}."

        await self._send_dm(applicant, content, embed, outcome)

        if accepted:
            title = "Application Accepted"
            description = f"✅ An application has been accepted for <@{applicant.id}> by **{executor.display_name}**."
        else:
            title = "Application Rejected"
            description = f"❌ An application has been rejected for <@{applicant.id}> by **{executor.display_name}**."
        delivered = await self.event_logger.log_event(settings, title, description)
        if delivered:
            outcome.record(LOG, True)
        elif not settings.log_channel_id:
            outcome.record(LOG, False, skipped=True)
        else:
            outcome.record(LOG, False, DeliveryError(f"log channel {settings.log_channel_id} unavailable"))

        await self._post_response(settings, content, embed, outcome)

    # --- Individual side effects -----------------------------------------------
    async def _assign_role(self, guild, executor, applicant, role, outcome: DecisionOutcome) -> None:
        member = guild.get_member(applicant.id)
        if member is None:
            try:
                member = await guild.fetch_member(applicant.id)
            except discord.NotFound:
                member = None
            except discord.HTTPException as e:
                error = RoleAssignmentError(f"could not fetch member {applicant.id}: {e}")
                logging.error("Role assignment failed: %s", error)
                outcome.record(ROLE, False, error)
                return
        if member is None:
            error = RoleAssignmentError(f"{applicant} is not a member of this server")
            logging.warning("Role assignment failed: %s", error)
            outcome.record(ROLE, False, error)
            return

        try:
            await member.add_roles(role, reason=f"Visa application accepted by {executor}")
        except discord.Forbidden:
            error = RoleAssignmentError(f"missing permission to assign {role.name}")
        except discord.HTTPException as e:
            error = RoleAssignmentError(f"could not assign {role.name}: {e}")
        else:
            outcome.record(ROLE, True)
            return
        logging.error("Role assignment failed for %s: %s", applicant.id, error)
        outcome.record(ROLE, False, error)

    async def _send_dm(self, applicant, content: str, embed: discord.Embed, outcome: DecisionOutcome) -> None:
        try:
            await applicant.send(content=content, embed=embed)
        except discord.Forbidden:
            error = DmBlockedError(f"{applicant} does not accept direct messages")
        except discord.HTTPException as e:
            error = DeliveryError(f"could not DM {applicant}: {e}")
        else:
            outcome.record(DM, True)
            return
        logging.warning("DM to %s failed: %s", applicant.id, error)
        outcome.record(DM, False, error)

    async def _post_response(self, settings: GuildSettings, content: str, embed: discord.Embed, outcome: DecisionOutcome) -> None:
        if not settings.response_channel_id:
            logging.warning("Response channel not set for guild %s.", settings.guild_id)
            outcome.record(RESPONSE, False, skipped=True)
            return
        channel = await resolve_channel(self.bot, settings.response_channel_id, settings.guild_id)
        if channel is None:
            error = DeliveryError(f"response channel {settings.response_channel_id} not found")
            logging.error("Response channel not found for guild %s.", settings.guild_id)
            outcome.record(RESPONSE, False, error)
            return
        try:
            await channel.send(content=content, embed=embed)
        except discord.HTTPException as e:
            error = DeliveryError(f"could not post to response channel: {e}")
            logging.error("Response channel post failed for guild %s: %s", settings.guild_id, e)
            outcome.record(RESPONSE, False, error)
            return
        outcome.record(RESPONSE, True)
