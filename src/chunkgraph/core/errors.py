"""Exception hierarchy for chunkgraph."""


class ChunkGraphError(Exception):
    """Base class for all chunkgraph errors."""


class ConfigError(ChunkGraphError):
    """Raised when the configuration file cannot be read or validated."""


class BuildStatsError(ChunkGraphError):
    """Raised when a build stats document or size report is unusable."""


class GraphInvariantError(ChunkGraphError):
    """
    Raised when graph construction would break one of its invariants.

    This points at malformed input from the caller (for example a
    concatenation wrapper ending up as a link endpoint), never at a
    recoverable condition.
    """
