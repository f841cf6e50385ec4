class JobSearchError(Exception):
    """Base class for errors raised by the aggregator."""


class InvalidSearchError(JobSearchError):
    """The request cannot be searched at all (e.g. empty query)."""


class SourceError(JobSearchError):
    """A source API answered with a non-2xx status or an unusable payload."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source
