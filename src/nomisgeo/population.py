"""Retrieving mid-year population estimates by age from Nomis."""

import warnings

import pandas as pd

from nomisgeo.api import NomisAPI
from nomisgeo.constants import AGE_COLUMNS, AGE_TYPE_FIVE_YEAR
from nomisgeo.geography import GeoClassifier
from nomisgeo.options import OutputMode, PopulationSource, Sex
from nomisgeo.reshape import filter_observations, reshape
from nomisgeo.transforms import (
    aggregate_age_bands,
    sum_age_range,
    total_population,
)

SMALL_AREA_COVERAGE = ("England", "Wales")


def _fetch_age_rows(geog, sex, year, api=None, classifier=None):
    """
    Fetch raw age rows, routing each area to its estimates series.

    Areas smaller than a local authority come from the small-area-based
    estimates (England and Wales, 2011 onwards). Local authorities and
    larger areas come from the local-authority-based estimates (UK,
    1991 onwards). A series is only queried if some area needs it, and
    small-area rows come first.
    """

    api = api or NomisAPI()
    classifier = classifier or GeoClassifier()

    geog = [geog] if isinstance(geog, str) else list(geog)
    filters = {"date": year, "sex": Sex.parse(sex).code}
    small_area, local_authority = classifier.partition(geog)

    unserved = [
        code
        for code, coverage in classifier.coverage(small_area).items()
        if coverage not in SMALL_AREA_COVERAGE
    ]
    if unserved:
        warnings.warn(
            "Small-area population estimates only cover England and "
            "Wales; no data expected for: " + ", ".join(unserved),
            UserWarning,
        )

    frames = []
    for source, codes in (
        (PopulationSource.SMALL_AREA, small_area),
        (PopulationSource.LOCAL_AUTHORITY, local_authority),
    ):
        if codes:
            frame = api.fetch_data(
                source.dataset, codes, filters, columns=AGE_COLUMNS
            )
            frames.append(frame)

    if not frames:
        return pd.DataFrame(columns=AGE_COLUMNS)

    return pd.concat(frames, ignore_index=True)


def get_age(geog, sex="t", year="latest", output="n", api=None):
    """
    Retrieve raw population by age data from Nomis.

    Parameters
    ----------
    geog : str or sequence of str
        ONS nine-character area codes, e.g. `"E07000178"`.
    sex : {"t", "m", "f"}, default "t"
        Total, male or female population.
    year : int or "latest", default "latest"
        Year of the estimates.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Raises
    ------
    UnknownAreaCode
        If any area code cannot be classified.
    InvalidSex, InvalidOutputMode
        If `sex` or `output` are not recognised.

    Returns
    -------
    ages : pandas.DataFrame
        Every age row Nomis holds for the areas: individual ages, the
        all-ages total and five-year bands.
    """

    output = OutputMode.parse(output)
    rows = _fetch_age_rows(geog, sex, year, api)

    return filter_observations(rows, output)


def pop_total(geog, sex="t", year="latest", api=None):
    """
    Retrieve the total population of each area.

    Returns
    -------
    totals : pandas.DataFrame
        `geography_code`, `geography_name`, `date` and `obs_value` for
        each area.
    """

    return total_population(get_age(geog, sex, year, "n", api))


def pop_deciles(geog, sex="t", year="latest", output="n", api=None):
    """
    Retrieve the population of each area in ten-year age bands.

    Parameters
    ----------
    geog : str or sequence of str
        ONS nine-character area codes.
    sex : {"t", "m", "f"}, default "t"
        Total, male or female population.
    year : int or "latest", default "latest"
        Year of the estimates.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Returns
    -------
    bands : pandas.DataFrame
        A row per area and date with columns `aged_0_9` through to
        `aged_80_plus`.
    """

    output = OutputMode.parse(output)
    rows = _fetch_age_rows(geog, sex, year, api)
    rows = rows.loc[rows["c_age_type"] == AGE_TYPE_FIVE_YEAR]
    rows = rows.drop(columns=["c_age_type", "c_age_code"])

    wide = reshape(rows, output, category="c_age_name")

    return aggregate_age_bands(wide)


def pop_range(
    geog, sex="t", year="latest", lower=0, upper=90, output="n", api=None
):
    """
    Retrieve the population of each area within an age range.

    The age 90 stands for all ages from 90 upwards.

    Parameters
    ----------
    geog : str or sequence of str
        ONS nine-character area codes.
    sex : {"t", "m", "f"}, default "t"
        Total, male or female population.
    year : int or "latest", default "latest"
        Year of the estimates.
    lower : int, default 0
        Lowest age included.
    upper : int, default 90
        Highest age included.
    output : {"n", "p"}, default "n"
        Counts or percentages.
    api : nomisgeo.NomisAPI, optional
        Client to use.

    Returns
    -------
    population : pandas.DataFrame
        A row per area and date with the population in `pop`.
    """

    if lower > upper:
        raise ValueError(
            f"Lower bound ({lower}) must not exceed upper bound ({upper})"
        )

    return sum_age_range(get_age(geog, sex, year, output, api), lower, upper)
