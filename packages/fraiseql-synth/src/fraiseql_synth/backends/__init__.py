"""Backend implementations for writing seed data."""

from fraiseql_synth.backends.direct import DirectBackend
from fraiseql_synth.backends.staging import StagingBackend

__all__ = ["DirectBackend", "StagingBackend"]
