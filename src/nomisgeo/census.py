"""Retrieving 2011 Census tables from Nomis."""

import warnings

from nomisgeo.api import NomisAPI
from nomisgeo.constants import (
    CENSUS_COLUMNS,
    CENSUS_EW_COLUMNS,
    ETHNIC_DETAIL_DATASET,
    RURAL_URBAN_TOTAL,
)
from nomisgeo.errors import TableNotFound
from nomisgeo.geography import GeoClassifier
from nomisgeo.options import CensusFamily, OutputMode
from nomisgeo.reshape import filter_observations, reshape
from nomisgeo.transforms import (
    bucket_country_of_birth,
    regroup_tenure,
    split_ethnic_groups,
)


class CensusTableResolver:
    """
    Resolver of ONS census table titles to Nomis dataset identifiers.

    Parameters
    ----------
    api : nomisgeo.NomisAPI, optional
        Client used for the catalogue search. A new one is made if not
        given.
    """

    def __init__(self, api=None):

        self.api = api or NomisAPI()

    def resolve(self, title):
        """
        Find the Nomis identifier of a census table.

        The catalogue is searched for names starting with `title`. If
        several tables match, the first one in the order Nomis returns
        them is used. A title that is a prefix of another (say, a table
        and its variant with an extra suffix) can therefore resolve to
        the wrong table.

        Parameters
        ----------
        title : str
            ONS title of a 2011 Census table, e.g. `"KS201EW"`.

        Raises
        ------
        TableNotFound
            If the search finds nothing.

        Returns
        -------
        dataset_id : str
            Nomis identifier, e.g. `"NM_608_1"`.
        """

        tables = self.api.search_tables(f"{title}*")
        if tables.empty:
            raise TableNotFound(title)

        return tables["id"].iloc[0]


def find_census_table(title, api=None):
    """Return the Nomis identifier of a census table. See `resolve`."""

    return CensusTableResolver(api).resolve(title)


def _warn_outside_family(geog, family, classifier=None):
    """Warn about codes the table family publishes no data for."""

    classifier = classifier or GeoClassifier()
    outside = classifier.outside_family(geog, family)
    if outside:
        warnings.warn(
            f"Census tables with the '{family.value}' suffix do not cover "
            "area code(s): " + ", ".join(outside),
            UserWarning,
        )


def _as_codes(geog):

    if isinstance(geog, str):
        return [geog]

    return list(geog)


def _fetch_census(title, geog, columns, api=None, dataset_id=None):
    """Resolve a table (unless its id is known) and fetch raw rows."""

    api = api or NomisAPI()
    if dataset_id is None:
        dataset_id = CensusTableResolver(api).resolve(title)

    return api.fetch_data(dataset_id, geog, columns=columns)


def get_c11_uk(title, geog, output="n", api=None):
    """
    Retrieve a single-variable 2011 Census UK table from Nomis.

    UK tables are those with a `UK` suffix; see
    `nomisgeo.reference.census_menu`. Not every table is guaranteed to
    work.

    Parameters
    ----------
    title : str
        ONS title of the table, e.g. `"KS404UK"`.
    geog : str or sequence of str
        ONS nine-character area codes.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Returns
    -------
    data : pandas.DataFrame
        A row per area with `geography_code`, `geography_name` and a
        column for each category of the table.
    """

    output = OutputMode.parse(output)
    geog = _as_codes(geog)
    GeoClassifier().classify(geog)
    rows = _fetch_census(title, geog, CENSUS_COLUMNS, api)

    return reshape(rows, output)


def get_c11_ew(title, geog, output="n", api=None):
    """
    Retrieve a single-variable 2011 Census England and Wales table.

    Most Key Statistics tables (`KS` prefix, `EW` suffix) work. Only
    the rural/urban `"Total"` rows are kept. Codes outside England and
    Wales raise a warning.

    Parameters
    ----------
    title : str
        ONS title of the table, e.g. `"KS404EW"`.
    geog : str or sequence of str
        ONS nine-character area codes.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Returns
    -------
    data : pandas.DataFrame
        A row per area with `geography_code`, `geography_name` and a
        column for each category of the table.
    """

    output = OutputMode.parse(output)
    geog = _as_codes(geog)
    _warn_outside_family(geog, CensusFamily.ENGLAND_WALES)
    rows = _fetch_census(title, geog, CENSUS_EW_COLUMNS, api)

    return reshape(rows, output, region_filter=RURAL_URBAN_TOTAL)


def get_c11(title, geog, output="n", api=None):
    """Retrieve a 2011 Census table, picking the family from its title."""

    family = GeoClassifier.table_family(title)
    if family is CensusFamily.UK:
        return get_c11_uk(title, geog, output, api)

    return get_c11_ew(title, geog, output, api)


def c11_ethgrps_uk(geog, output="n", api=None):
    """Population by broad ethnic group across the UK (`KS201UK`)."""

    return get_c11_uk("KS201UK", geog, output, api)


def c11_ethgrps_ew(geog, output="n", api=None):
    """Population by broad ethnic group in England and Wales (`KS201EW`)."""

    return get_c11_ew("KS201EW", geog, output, api)


def c11_ethdetail_ew(geog, output="n", summarise=False, api=None):
    """
    Population by detailed ethnic group in England and Wales.

    Parameters
    ----------
    geog : str or sequence of str
        ONS nine-character area codes.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    summarise : bool, default False
        Whether to add together detailed groups reported under more
        than one broad group. See
        `nomisgeo.transforms.split_ethnic_groups`.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Returns
    -------
    groups : pandas.DataFrame
        A row per detailed ethnic group per area.
    """

    output = OutputMode.parse(output)
    geog = _as_codes(geog)
    _warn_outside_family(geog, CensusFamily.ENGLAND_WALES)
    rows = _fetch_census(
        None, geog, CENSUS_EW_COLUMNS, api, dataset_id=ETHNIC_DETAIL_DATASET
    )
    rows = filter_observations(rows, output, region_filter=RURAL_URBAN_TOTAL)

    return split_ethnic_groups(rows, summarise)


def c11_tenure_uk(geog, output="n", api=None):
    """
    Households by housing tenure across the UK (`KS402UK`).

    Returns
    -------
    tenure : pandas.DataFrame
        A row per area with owned, social rented, private rented and
        other tenure columns. See `nomisgeo.transforms.regroup_tenure`.
    """

    return regroup_tenure(get_c11_uk("KS402UK", geog, output, api))


def c11_cob_uk(geog, output="n", buckets=None, api=None):
    """
    Population by broad country of birth across the UK (`QS203UK`).

    Parameters
    ----------
    geog : str or sequence of str
        ONS nine-character area codes.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    buckets : nomisgeo.constants.CountryOfBirthBuckets, optional
        Category to bucket table. Defaults to `COB_BUCKETS_2011`.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Returns
    -------
    cob : pandas.DataFrame
        A row per area with `uk`, `ireland`, `other_eu`, `rest_europe`
        and `rest_world` columns.
    """

    return bucket_country_of_birth(
        get_c11_uk("QS203UK", geog, output, api), buckets
    )
