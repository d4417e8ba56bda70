"""Exceptions raised by the package."""


class NomisGeoError(Exception):
    """Base class for every error raised by `nomisgeo`."""


class UnknownAreaCode(NomisGeoError, ValueError):
    """
    One or more area codes have an entity prefix missing from the key.

    Parameters
    ----------
    codes : list of str
        Every code that could not be classified, in input order.
    """

    def __init__(self, codes):
        self.codes = list(codes)
        super().__init__(
            "Unrecognised entity prefix for area code(s): "
            + ", ".join(map(repr, self.codes))
        )


class TableNotFound(NomisGeoError, LookupError):
    """A census table title matched nothing in the Nomis catalogue."""

    def __init__(self, title):
        self.title = title
        super().__init__(f"No Nomis dataset found for census table '{title}'")


class UpstreamUnavailable(NomisGeoError):
    """The remote API could not be reached or failed on its side."""

    def __init__(self, url, reason=None):
        self.url = url
        self.reason = reason
        message = f"Upstream unavailable: {url}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class UpstreamRejected(NomisGeoError):
    """The remote API answered but refused or garbled the request."""

    def __init__(self, url, reason):
        self.url = url
        self.reason = reason
        super().__init__(f"Upstream rejected {url}: {reason}")


class SchemaMismatch(NomisGeoError, ValueError):
    """A table lacks the columns an operation needs."""

    def __init__(self, missing, table="table"):
        self.missing = list(missing)
        self.table = table
        super().__init__(
            f"The {table} is missing expected column(s): "
            + ", ".join(map(repr, self.missing))
        )


class InvalidOutputMode(NomisGeoError, ValueError):
    """An output mode other than `"n"` or `"p"` was given."""


class InvalidSex(NomisGeoError, ValueError):
    """A sex other than `"m"`, `"f"` or `"t"` was given."""


class BatchLookupError(NomisGeoError):
    """
    Some units of a batch lookup failed.

    Every unit is still attempted, so `partial` holds whatever succeeded.

    Attributes
    ----------
    failures : dict
        Maps each failed unit to the exception it raised.
    partial : pandas.DataFrame
        Concatenated results of the units that succeeded.
    """

    def __init__(self, failures, partial):
        self.failures = dict(failures)
        self.partial = partial
        details = "; ".join(
            f"{unit}: {error}" for unit, error in self.failures.items()
        )
        super().__init__(
            f"{len(self.failures)} lookup(s) failed: {details}"
        )
