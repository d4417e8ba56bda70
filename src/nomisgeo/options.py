"""Closed sets of options accepted by the data retrieval functions."""

from enum import Enum

from nomisgeo.constants import LOCAL_AUTHORITY_DATASET, SMALL_AREA_DATASET
from nomisgeo.errors import InvalidOutputMode, InvalidSex


class OutputMode(Enum):
    """Which Nomis measure to keep: counts (`"n"`) or percentages (`"p"`)."""

    COUNT = "n"
    PERCENT = "p"

    @property
    def label(self):
        """The `measures_name` value Nomis uses for this mode."""

        return "Value" if self is OutputMode.COUNT else "Percent"

    @classmethod
    def parse(cls, output):
        """
        Convert a user-supplied output option into an `OutputMode`.

        Parameters
        ----------
        output : str or OutputMode
            Either `"n"` for counts or `"p"` for percentages.

        Raises
        ------
        InvalidOutputMode
            If `output` is anything else.

        Returns
        -------
        mode : OutputMode
        """

        if isinstance(output, cls):
            return output

        try:
            return cls(output)
        except ValueError:
            raise InvalidOutputMode(
                f"Output must be one of 'n' or 'p', not {output!r}"
            ) from None


class Sex(Enum):
    """Sex filter for population estimates."""

    MALE = "m"
    FEMALE = "f"
    TOTAL = "t"

    @property
    def code(self):
        """The Nomis `sex` parameter value."""

        return {"m": 1, "f": 2, "t": 0}[self.value]

    @classmethod
    def parse(cls, sex):
        """Convert `"m"`, `"f"` or `"t"` into a `Sex`."""

        if isinstance(sex, cls):
            return sex

        try:
            return cls(sex)
        except ValueError:
            raise InvalidSex(
                f"Sex must be one of 'm', 'f' or 't', not {sex!r}"
            ) from None


class PopulationSource(Enum):
    """Nomis population estimates series an area is served by."""

    SMALL_AREA = "sa_based"
    LOCAL_AUTHORITY = "la_based"

    @property
    def dataset(self):
        if self is PopulationSource.SMALL_AREA:
            return SMALL_AREA_DATASET
        return LOCAL_AUTHORITY_DATASET


class CensusFamily(Enum):
    """2011 Census table families published on Nomis."""

    UK = "UK"
    ENGLAND_WALES = "EW"

    @property
    def coverage(self):
        """Area coverages the family publishes data for."""

        if self is CensusFamily.UK:
            return None
        return frozenset(("England", "Wales", "England and Wales"))
