"""Pydantic schemas for tickets read back out of thread titles."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TicketCategory(str, Enum):
    """Kind of ticket a thread can be opened as."""

    BUG = "bug"
    FEATURE = "feature"

    @property
    def tag_suffix(self) -> str:
        """Suffix appended to the tag prefix in thread titles."""
        return "BUG" if self is TicketCategory.BUG else "FEAT"

    @property
    def verbose(self) -> str:
        """Human readable name used in replies."""
        return "bug report" if self is TicketCategory.BUG else "feature request"


class Ticket(BaseModel):
    """A ticket as encoded in a thread title.

    Titles look like ``[VICE-BUG-3] Crash on load``, optionally prefixed with
    one or more ``✅`` and suffixed with one or more ``❌``. Both markers can be
    present at once since the transitions never clear each other.
    """

    model_config = ConfigDict(frozen=True)

    category: TicketCategory
    number: int = Field(..., ge=1)
    subject: str
    complete: bool = False
    rejected: bool = False

    @property
    def status(self) -> str:
        """Return the display status of the ticket."""
        if self.complete:
            return "complete"
        if self.rejected:
            return "rejected"
        return "open"
