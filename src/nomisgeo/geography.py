"""Classifying ONS nine-character area codes by their entity prefix."""

from nomisgeo.errors import UnknownAreaCode
from nomisgeo.options import CensusFamily, PopulationSource
from nomisgeo.reference import geo_types

PREFIX_LENGTH = 3


class GeoClassifier:
    """
    Classifier of area codes against the entity-type key.

    The first three characters of an ONS code (e.g. `E01` for an LSOA
    in England) say what kind of area it is. From that, the classifier
    decides which Nomis population series serves the area and whether a
    census table family covers it.

    Parameters
    ----------
    key : pandas.DataFrame, optional
        Entity-type key with `ent_code`, `ent_name`, `ent_type`,
        `ent_coverage` and `nomis_source` columns. Defaults to the key
        shipped with the package.

    Attributes
    ----------
    entries : dict
        Maps each entity prefix to its row of the key as a dictionary.
    """

    def __init__(self, key=None):

        key = geo_types() if key is None else key
        self.entries = {
            record["ent_code"]: record for record in key.to_dict("records")
        }

    def _lookup(self, codes):
        """Match every code to its key entry or fail listing all misses."""

        codes = list(codes)
        unknown = [
            code
            for code in codes
            if str(code)[:PREFIX_LENGTH] not in self.entries
        ]
        if unknown:
            raise UnknownAreaCode(unknown)

        return {code: self.entries[code[:PREFIX_LENGTH]] for code in codes}

    def entity(self, code):
        """
        Retrieve the entity-type entry for a single code.

        Raises
        ------
        UnknownAreaCode
            If the prefix of `code` is not in the key.
        """

        return dict(self._lookup([code])[code])

    def classify(self, codes):
        """
        Determine the population source for each area code.

        Parameters
        ----------
        codes : iterable of str
            ONS nine-character area codes.

        Raises
        ------
        UnknownAreaCode
            If any code has a prefix missing from the key. The error
            lists every such code.

        Returns
        -------
        sources : dict
            Maps each code to a `PopulationSource`.
        """

        return {
            code: PopulationSource(entry["nomis_source"])
            for code, entry in self._lookup(codes).items()
        }

    def partition(self, codes):
        """
        Split codes by population source.

        Returns
        -------
        small_area : list of str
            Codes served by the small-area-based estimates.
        local_authority : list of str
            Codes served by the local-authority-based estimates.
        """

        sources = self.classify(codes)
        small_area = [
            code
            for code, source in sources.items()
            if source is PopulationSource.SMALL_AREA
        ]
        local_authority = [
            code
            for code, source in sources.items()
            if source is PopulationSource.LOCAL_AUTHORITY
        ]

        return small_area, local_authority

    def coverage(self, codes):
        """Map each code to the geographic coverage of its entity type."""

        return {
            code: entry["ent_coverage"]
            for code, entry in self._lookup(codes).items()
        }

    @staticmethod
    def table_family(title):
        """
        Determine the family of a 2011 Census table from its title.

        UK-wide tables end in `UK`. England and Wales tables end in `EW`
        (or `WA` for the Wales-only tables published alongside them).

        Raises
        ------
        ValueError
            If the title has neither suffix.
        """

        suffix = str(title).strip().upper()[-2:]
        if suffix == "UK":
            return CensusFamily.UK
        if suffix in ("EW", "WA"):
            return CensusFamily.ENGLAND_WALES

        raise ValueError(
            f"Cannot tell the table family of '{title}': expected a title "
            "ending in 'UK' or 'EW'"
        )

    def outside_family(self, codes, family):
        """
        Find codes that a census table family does not cover.

        Parameters
        ----------
        codes : iterable of str
            Area codes to check.
        family : CensusFamily
            Table family being queried.

        Returns
        -------
        outside : list of str
            Codes whose coverage falls outside the family, in input
            order. Always empty for UK-wide tables.
        """

        if family.coverage is None:
            return []

        return [
            code
            for code, coverage in self.coverage(codes).items()
            if coverage not in family.coverage
        ]
