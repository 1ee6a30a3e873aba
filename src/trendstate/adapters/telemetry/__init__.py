from .console import ConsoleTelemetrySink
from .db_journal import DbEventJournalSink
from .memory import InMemoryTelemetrySink
from .otel import OtelTelemetrySink

__all__ = [
    "ConsoleTelemetrySink",
    "DbEventJournalSink",
    "InMemoryTelemetrySink",
    "OtelTelemetrySink",
]
