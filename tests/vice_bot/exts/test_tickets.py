from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from discord.ext import commands

from vice_bot.errors import PlatformError
from vice_bot.exts.tickets._schemas import TicketCategory
from vice_bot.exts.tickets.tickets import Tickets, setup


async def _aiter(items):
    for item in items:
        yield item


def _make_message(mention):
    message = MagicMock(spec=discord.Message)
    message.author = MagicMock()
    message.author.mention = mention
    return message


def _make_thread(*, name="help pls", messages=(), thread_type=discord.ChannelType.public_thread):
    thread = MagicMock(spec=discord.Thread)
    thread.id = 42
    thread.name = name
    thread.type = thread_type
    thread.join = AsyncMock()
    thread.edit = AsyncMock()
    thread.history = MagicMock(side_effect=lambda **_: _aiter(messages))
    return thread


def _make_interaction(channel, channel_id=42):
    interaction = MagicMock(spec=discord.Interaction)
    interaction.channel = channel
    interaction.channel_id = channel_id
    interaction.user = MagicMock()
    interaction.user.id = 99
    interaction.response = MagicMock()
    interaction.response.defer = AsyncMock()
    interaction.followup = MagicMock()
    interaction.followup.send = AsyncMock()
    return interaction


def _http_error():
    return discord.HTTPException(MagicMock(status=403, reason="Forbidden"), "Missing Permissions")


def _sent_content(interaction):
    interaction.followup.send.assert_called_once()
    args, kwargs = interaction.followup.send.call_args
    return kwargs.get("content") or args[0]


@pytest.fixture
def bot():
    mock_bot = MagicMock(spec=commands.Bot)
    mock_bot.fetch_channel = AsyncMock()
    mock_bot.add_cog = AsyncMock()
    return mock_bot


@pytest.fixture
def cog(bot):
    return Tickets(bot)


@pytest.mark.asyncio
async def test_bug_opens_ticket(cog):
    thread = _make_thread(messages=[_make_message("<@1>")])
    interaction = _make_interaction(thread)

    await cog.bug.callback(cog, interaction, "Crash on load")

    interaction.response.defer.assert_awaited_once()
    thread.join.assert_awaited_once()
    thread.history.assert_called_once_with(limit=1)
    thread.edit.assert_awaited_once_with(name="[VICE-BUG-1] Crash on load")
    content = _sent_content(interaction)
    assert content.startswith("Good news, <@1>! Your bug report was accepted")
    assert "Your ticket number is 1." in content


@pytest.mark.asyncio
async def test_feature_opens_ticket(cog):
    thread = _make_thread(messages=[_make_message("<@2>")])
    interaction = _make_interaction(thread)

    await cog.feature.callback(cog, interaction, "Dark mode")

    thread.edit.assert_awaited_once_with(name="[VICE-FEAT-1] Dark mode")
    assert "Your feature request was accepted" in _sent_content(interaction)


@pytest.mark.asyncio
async def test_ticket_numbers_increase_across_commands(cog):
    for expected in range(1, 4):
        thread = _make_thread(messages=[_make_message("<@1>")])
        await cog.bug.callback(cog, _make_interaction(thread), "Crash")
        thread.edit.assert_awaited_once_with(name=f"[VICE-BUG-{expected}] Crash")

    assert cog.machine.counters.current(TicketCategory.FEATURE) == 0


@pytest.mark.asyncio
async def test_complete_uses_oldest_of_fifty(cog):
    messages = [_make_message("<@bot>"), _make_message("<@mod>"), _make_message("<@op>")]
    thread = _make_thread(name="[VICE-BUG-3] Crash on load", messages=messages)
    interaction = _make_interaction(thread)

    await cog.complete.callback(cog, interaction)

    thread.history.assert_called_once_with(limit=50)
    thread.join.assert_not_awaited()
    thread.edit.assert_awaited_once_with(name="✅ [VICE-BUG-3] Crash on load")
    assert _sent_content(interaction).startswith("Good news, <@op>!")


@pytest.mark.asyncio
async def test_notdoing_suffixes_cross(cog):
    thread = _make_thread(name="[VICE-FEAT-2] Dark mode", messages=[_make_message("<@op>")])
    interaction = _make_interaction(thread)

    await cog.notdoing.callback(cog, interaction)

    thread.history.assert_called_once_with(limit=1)
    thread.edit.assert_awaited_once_with(name="[VICE-FEAT-2] Dark mode ❌")
    assert _sent_content(interaction).startswith("Unfortunately, <@op>,")


@pytest.mark.asyncio
async def test_empty_history_uses_unknown_user(cog):
    thread = _make_thread(messages=[])
    interaction = _make_interaction(thread)

    await cog.bug.callback(cog, interaction, "Crash")

    assert "Good news, unknown user!" in _sent_content(interaction)


@pytest.mark.asyncio
async def test_text_channel_is_invalid_context(cog):
    channel = MagicMock(spec=discord.TextChannel)
    channel.name = "general"
    channel.edit = AsyncMock()
    interaction = _make_interaction(channel)

    await cog.bug.callback(cog, interaction, "Crash")

    channel.edit.assert_not_awaited()
    assert _sent_content(interaction) == "This command can only be used in a thread."
    assert cog.machine.counters.current(TicketCategory.BUG) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("command", ["bug", "feature", "complete", "notdoing"])
async def test_private_thread_is_invalid_context(cog, command):
    thread = _make_thread(thread_type=discord.ChannelType.private_thread)
    interaction = _make_interaction(thread)

    callback = getattr(cog, command).callback
    if command in {"bug", "feature"}:
        await callback(cog, interaction, "Crash")
    else:
        await callback(cog, interaction)

    thread.join.assert_not_awaited()
    thread.history.assert_not_called()
    thread.edit.assert_not_awaited()
    assert _sent_content(interaction) == "This command can only be used in a thread."


@pytest.mark.asyncio
async def test_partial_channel_is_fetched(cog, bot):
    thread = _make_thread(messages=[_make_message("<@1>")])
    bot.fetch_channel.return_value = thread
    interaction = _make_interaction(MagicMock(spec=discord.PartialMessageable), channel_id=42)

    await cog.bug.callback(cog, interaction, "Crash")

    bot.fetch_channel.assert_awaited_once_with(42)
    thread.edit.assert_awaited_once_with(name="[VICE-BUG-1] Crash")


@pytest.mark.asyncio
async def test_fetch_failure_raises_platform_error(cog, bot):
    bot.fetch_channel.side_effect = _http_error()
    interaction = _make_interaction(None, channel_id=42)

    with pytest.raises(PlatformError, match="fetch channel"):
        await cog.complete.callback(cog, interaction)

    interaction.followup.send.assert_not_called()


@pytest.mark.asyncio
async def test_rename_failure_raises_platform_error(cog):
    thread = _make_thread(messages=[_make_message("<@1>")])
    thread.edit.side_effect = _http_error()
    interaction = _make_interaction(thread)

    with pytest.raises(PlatformError, match="rename thread") as exc_info:
        await cog.bug.callback(cog, interaction, "Crash")

    assert isinstance(exc_info.value.original, discord.HTTPException)
    interaction.followup.send.assert_not_called()
    # The number is spent even though the rename failed
    assert cog.machine.counters.current(TicketCategory.BUG) == 1


@pytest.mark.asyncio
async def test_join_failure_raises_platform_error(cog):
    thread = _make_thread()
    thread.join.side_effect = _http_error()
    interaction = _make_interaction(thread)

    with pytest.raises(PlatformError, match="join thread"):
        await cog.feature.callback(cog, interaction, "Dark mode")

    thread.edit.assert_not_awaited()
    assert cog.machine.counters.current(TicketCategory.FEATURE) == 0


def test_counters_survive_cog_reload(bot):
    first = Tickets(bot)
    first.machine.counters.next(TicketCategory.BUG)

    second = Tickets(bot)

    assert second.machine.counters is first.machine.counters
    assert second.machine.counters.current(TicketCategory.BUG) == 1


@pytest.mark.asyncio
async def test_setup_adds_cog(bot):
    await setup(bot)

    bot.add_cog.assert_awaited_once()
    assert isinstance(bot.add_cog.call_args.args[0], Tickets)


@pytest.mark.asyncio
async def test_overlong_name_is_refused_without_rename(cog):
    thread = _make_thread(messages=[_make_message("<@1>")])
    interaction = _make_interaction(thread)

    await cog.bug.callback(cog, interaction, "a" * 100)

    thread.edit.assert_not_awaited()
    assert "at most 100" in _sent_content(interaction)
    assert cog.machine.counters.current(TicketCategory.BUG) == 0

    follow_up = _make_thread(messages=[_make_message("<@1>")])
    await cog.bug.callback(cog, _make_interaction(follow_up), "Crash")
    follow_up.edit.assert_awaited_once_with(name="[VICE-BUG-1] Crash")
