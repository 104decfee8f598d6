"""Message Log Port."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..dto.reminder_dtos import MessageLogEntry


@runtime_checkable
class IMessageLog(Protocol):
    """Append-only log of outbound messages."""

    async def record(self, entry: "MessageLogEntry") -> None: ...
