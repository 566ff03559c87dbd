#######################################################
# Config Cog - Manage the log and response channels
#######################################################
import discord
from discord.ext import commands

from visa_bot.util.perms import has_allowed_role


class Config(commands.Cog):
    def __init__(self, bot):
        self.bot = bot
        self.workflow = bot.workflow

    @has_allowed_role()
    @commands.slash_command(name="setlog", description="Set the logging channel for application events")
    async def setlog(
        self,
        ctx: discord.ApplicationContext,
        channel: discord.Option(discord.TextChannel, description="The channel to log application events"),
    ):
        """Usage: /setlog <channel>"""
        await ctx.defer(ephemeral=True)
        self.workflow.set_log_channel(ctx.guild.id, channel.id)
        await ctx.respond(f"Log channel has been set to {channel.mention}", ephemeral=True)

    @has_allowed_role()
    @commands.slash_command(name="setresponse", description="Set the response channel for application messages")
    async def setresponse(
        self,
        ctx: discord.ApplicationContext,
        channel: discord.Option(discord.TextChannel, description="The channel to send application responses"),
    ):
        """Usage: /setresponse <channel>"""
        await ctx.defer(ephemeral=True)
        self.workflow.set_response_channel(ctx.guild.id, channel.id)
        await ctx.respond(f"Response channel has been set to {channel.mention}", ephemeral=True)


# Setup function to add the cog to the bot
def setup(bot):
    bot.add_cog(Config(bot))
