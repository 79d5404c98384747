class DfsException(Exception):
    """Base class for every error raised by dfs_projector."""


class ProviderError(DfsException):
    """A stat provider could not deliver a response."""

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(f"{source}: {detail}")
        self.source = source
        self.detail = detail


class MissingDataError(DfsException):
    """A provider answered but had no usable statistics."""


class ShapeMismatchError(DfsException):
    """A provider payload lacked a field the parser requires."""

    def __init__(self, source: str, field: str) -> None:
        super().__init__(f"{source} payload missing '{field}'")
        self.source = source
        self.field = field


class SlateUnavailableError(DfsException):
    """The schedule for a slate could not be obtained, so nothing can be projected."""


class ConfigError(DfsException):
    pass
