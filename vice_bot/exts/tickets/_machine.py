"""Ticket numbering and the title transitions a ticket thread goes through.

Nothing here talks to Discord. Every transition takes the thread's current
state as plain values and returns a :class:`TicketOutcome` describing the new
title and the reply to send; applying those is up to the caller.
"""

import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass

from vice_bot.errors import InvalidContextError, TitleTooLongError, UserFriendlyError
from vice_bot.exts import tickets

from ._schemas import Ticket, TicketCategory

log = logging.getLogger(__name__)


class TicketCounters:
    """Monotonic ticket numbers, one sequence per category.

    Numbers start at 1, are handed out exactly once and are never reset
    except by creating a new instance.
    """

    def __init__(self) -> None:
        """Initialize both counters to zero."""
        self._values = dict.fromkeys(TicketCategory, 0)
        self._lock = threading.Lock()

    def next(self, category: TicketCategory) -> int:
        """Increment the counter for ``category`` and return the new value."""
        with self._lock:
            self._values[category] += 1
            return self._values[category]

    def next_if(self, category: TicketCategory, accept: Callable[[int], bool]) -> int | None:
        """Advance the counter for ``category`` only if ``accept`` approves the next value.

        Returns the new value, or ``None`` without touching the counter.
        """
        with self._lock:
            candidate = self._values[category] + 1
            if not accept(candidate):
                return None
            self._values[category] = candidate
            return candidate

    def current(self, category: TicketCategory) -> int:
        """Return the last number handed out for ``category`` (0 if none)."""
        with self._lock:
            return self._values[category]


@dataclass(frozen=True, slots=True)
class TicketOutcome:
    """Result of a ticket transition."""

    title: str
    reply: str
    ticket: Ticket | None = None
    error: UserFriendlyError | None = None

    @property
    def ok(self) -> bool:
        """Whether the transition succeeded and the thread should be renamed."""
        return self.error is None


def format_ticket_title(tag: str, number: int, name: str) -> str:
    """Build the title of a freshly opened ticket, e.g. ``[VICE-BUG-1] Crash``."""
    return f"[{tag}-{number}] {name}"


def mark_complete(title: str) -> str:
    """Prefix ``title`` with the complete glyph."""
    return f"{tickets.COMPLETE_GLYPH} {title}"


def mark_rejected(title: str) -> str:
    """Suffix ``title`` with the rejected glyph."""
    return f"{title} {tickets.REJECTED_GLYPH}"


def parse_ticket_title(title: str, tag_prefix: str = "VICE") -> Ticket | None:
    """Read a ticket back out of a thread title.

    Returns ``None`` if the title carries no ticket tag. Titles edited by hand
    may not parse.
    """
    pattern = re.compile(
        rf"^(?P<complete>(?:{tickets.COMPLETE_GLYPH} )*)"
        rf"\[{re.escape(tag_prefix)}-(?P<suffix>BUG|FEAT)-(?P<number>\d+)\] "
        rf"(?P<subject>.*?)"
        rf"(?P<rejected>(?: {tickets.REJECTED_GLYPH})*)$",
        re.DOTALL,
    )
    match = pattern.match(title)
    if match is None:
        return None

    category = TicketCategory.BUG if match["suffix"] == "BUG" else TicketCategory.FEATURE
    number = int(match["number"])
    if number < 1:
        return None

    return Ticket(
        category=category,
        number=number,
        subject=match["subject"],
        complete=bool(match["complete"]),
        rejected=bool(match["rejected"]),
    )


class TicketStateMachine:
    """Decides the new title and reply for each ticket command.

    Args:
        counters: Ticket number sequences. A fresh pair is created if omitted.
        tag_prefix: Project prefix used in ticket tags (``VICE`` -> ``VICE-BUG``).
        team_name: Team named in acknowledgement replies.
    """

    def __init__(
        self,
        counters: TicketCounters | None = None,
        *,
        tag_prefix: str = "VICE",
        team_name: str = "Vice Development Team",
    ) -> None:
        """Initialize the state machine."""
        self.counters = counters if counters is not None else TicketCounters()
        self.tag_prefix = tag_prefix
        self.team_name = team_name

    def tag_for(self, category: TicketCategory) -> str:
        """Return the title tag for ``category``, e.g. ``VICE-FEAT``."""
        return f"{self.tag_prefix}-{category.tag_suffix}"

    def parse(self, title: str) -> Ticket | None:
        """Parse ``title`` using this machine's tag prefix."""
        return parse_ticket_title(title, self.tag_prefix)

    @staticmethod
    def _invalid_context(command: str, current_title: str) -> TicketOutcome:
        error = InvalidContextError(command)
        return TicketOutcome(title=current_title, reply=error.user_message, error=error)

    @staticmethod
    def _too_long(command: str, current_title: str, title: str) -> TicketOutcome:
        error = TitleTooLongError(command, title, tickets.MAX_TITLE_LENGTH)
        return TicketOutcome(title=current_title, reply=error.user_message, error=error)

    def open_ticket(
        self,
        category: TicketCategory,
        name: str,
        current_title: str,
        *,
        in_public_thread: bool,
        original_poster: str,
    ) -> TicketOutcome:
        """Open a new ticket of ``category`` named ``name``.

        The counter is only advanced when the command is used in a public
        thread and the resulting title fits Discord's name limit; the number
        in the title and the reply are always the same.
        """
        if not in_public_thread:
            return self._invalid_context(category.value, current_title)

        tag = self.tag_for(category)
        number = self.counters.next_if(
            category, lambda candidate: len(format_ticket_title(tag, candidate, name)) <= tickets.MAX_TITLE_LENGTH
        )
        if number is None:
            title = format_ticket_title(tag, self.counters.current(category) + 1, name)
            return self._too_long(category.value, current_title, title)
        log.debug("Allocated %s ticket number %s", category.value, number)

        title = format_ticket_title(tag, number, name)
        reply = tickets.OPEN_REPLY.format(
            poster=original_poster,
            kind=category.verbose,
            team=self.team_name,
            number=number,
        )
        ticket = Ticket(category=category, number=number, subject=name)
        return TicketOutcome(title=title, reply=reply, ticket=ticket)

    def open_bug(
        self, name: str, current_title: str, *, in_public_thread: bool, original_poster: str
    ) -> TicketOutcome:
        """Open a bug report ticket."""
        return self.open_ticket(
            TicketCategory.BUG,
            name,
            current_title,
            in_public_thread=in_public_thread,
            original_poster=original_poster,
        )

    def open_feature(
        self, name: str, current_title: str, *, in_public_thread: bool, original_poster: str
    ) -> TicketOutcome:
        """Open a feature request ticket."""
        return self.open_ticket(
            TicketCategory.FEATURE,
            name,
            current_title,
            in_public_thread=in_public_thread,
            original_poster=original_poster,
        )

    def complete(self, current_title: str, *, in_public_thread: bool, original_poster: str) -> TicketOutcome:
        """Mark a ticket complete.

        Not idempotent: completing twice yields ``✅ ✅ ...``. A prior ``❌`` is
        left in place.
        """
        if not in_public_thread:
            return self._invalid_context("complete", current_title)

        title = mark_complete(current_title)
        if len(title) > tickets.MAX_TITLE_LENGTH:
            return self._too_long("complete", current_title, title)
        reply = tickets.COMPLETE_REPLY.format(poster=original_poster)
        return TicketOutcome(title=title, reply=reply, ticket=self.parse(title))

    def reject(self, current_title: str, *, in_public_thread: bool, original_poster: str) -> TicketOutcome:
        """Mark a ticket as not going to be done."""
        if not in_public_thread:
            return self._invalid_context("notdoing", current_title)

        title = mark_rejected(current_title)
        if len(title) > tickets.MAX_TITLE_LENGTH:
            return self._too_long("notdoing", current_title, title)
        reply = tickets.REJECT_REPLY.format(poster=original_poster)
        return TicketOutcome(title=title, reply=reply, ticket=self.parse(title))
