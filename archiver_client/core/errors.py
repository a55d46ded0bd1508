"""Typed failures surfaced by archiver adapters and the query façade."""


class ArchiverError(Exception):
    """Base class for every failure raised by the archiver client."""


class ConnectionFailure(ArchiverError):
    """The transport could not be established or broke mid-exchange."""


class RequestTimeout(ConnectionFailure):
    """The per-call deadline elapsed before the transport returned."""


class NonSuccessStatus(ArchiverError):
    """The HTTP archiver answered with a status code other than 200."""

    def __init__(self, code: int, url: str = "") -> None:
        self.code = code
        self.url = url
        super().__init__(f"archiver returned HTTP {code}" + (f" for {url}" if url else ""))


class RpcStatusError(ArchiverError):
    """The RPC archiver answered with a non-OK status that is not a transport fault."""

    def __init__(self, code: str, details: str = "") -> None:
        self.code = code
        self.details = details
        super().__init__(f"archiver RPC failed with {code}" + (f": {details}" if details else ""))


class DecodeFailure(ArchiverError):
    """The wire payload was malformed or did not fit the canonical model."""


class AlreadyClosed(ArchiverError):
    """A query was issued on a client whose connection was already released."""
