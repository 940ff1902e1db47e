"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class TMDBError(ServiceError):
    pass


class TMDBConfigurationError(TMDBError):
    """The client is missing credentials or has an unusable base URL."""


class TMDBRequestError(TMDBError):
    """Transport failure or a non-success HTTP status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TMDBResponseError(TMDBError):
    """The body could not be decoded into a JSON object."""
