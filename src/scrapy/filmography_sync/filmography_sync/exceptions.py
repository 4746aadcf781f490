# filmography_sync/exceptions.py


class FilmographySyncError(Exception):
    """Base class for every error raised by the sync job."""


class IdentifierAbsent(FilmographySyncError):
    """The stored profile URL carries no recognizable name identifier."""


class TransportFailure(FilmographySyncError):
    """A profile page could not be fetched (network error or non-2xx status)."""

    def __init__(self, entity_id, message):
        super().__init__(message)
        self.entity_id = entity_id


class MalformedDocument(FilmographySyncError):
    """The embedded __NEXT_DATA__ block is missing or is not valid JSON."""


class SchemaDrift(FilmographySyncError):
    """The decoded payload has none of the known credit containers."""


class PersistenceFailure(FilmographySyncError):
    """Writing a credit row failed."""

    def __init__(self, entity_id, message):
        super().__init__(message)
        self.entity_id = entity_id


class FatalSetupFailure(FilmographySyncError):
    """The run cannot start: no storage connection or no pending set."""


class ConfigurationError(FatalSetupFailure):
    """Required configuration is missing or invalid."""
