#######################################################
# Applications Cog - /apply accept | reject | status
#######################################################
import discord
from discord.ext import commands

from visa_bot.util.perms import has_allowed_role


class Applications(commands.Cog):
    apply = discord.SlashCommandGroup("apply", "Handle visa applications (accept/reject)")

    def __init__(self, bot):
        self.bot = bot
        self.workflow = bot.workflow

    @has_allowed_role()
    @apply.command(name="accept", description="Accept an application")
    async def apply_accept(
        self,
        ctx: discord.ApplicationContext,
        applicant: discord.Option(discord.User, description="The applicant to accept"),
        role: discord.Option(discord.Role, description="Role to assign to the applicant"),
    ):
        """Usage: /apply accept <applicant> <role>
        Records the acceptance, grants the role, DMs the applicant and posts to the log/response channels.
        """
        await ctx.defer(ephemeral=True)
        settings = self.workflow.settings_for(ctx.guild.id)
        outcome = await self.workflow.accept(ctx.guild, ctx.author, applicant, role, settings)
        await ctx.respond(content=outcome.confirmation(), ephemeral=True)

    @has_allowed_role()
    @apply.command(name="reject", description="Reject an application")
    async def apply_reject(
        self,
        ctx: discord.ApplicationContext,
        applicant: discord.Option(discord.User, description="The applicant to reject"),
    ):
        """Usage: /apply reject <applicant>"""
        await ctx.defer(ephemeral=True)
        settings = self.workflow.settings_for(ctx.guild.id)
        outcome = await self.workflow.reject(ctx.guild, ctx.author, applicant, settings)
        await ctx.respond(content=outcome.confirmation(), ephemeral=True)

    @apply.command(name="status", description="Check the status of your application")
    async def apply_status(self, ctx: discord.ApplicationContext):
        """Show the invoking user their own application status. Read-only."""
        record = self.workflow.status(ctx.author.id)
        if record is None:
            await ctx.respond("You do not have an application on record.", ephemeral=True)
            return
        await ctx.respond(f"Your application status: **{record['status'].capitalize()}**", ephemeral=True)


# Setup function to add the cog to the bot
def setup(bot):
    bot.add_cog(Applications(bot))
