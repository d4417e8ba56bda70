"""Table-specific derivations applied on top of reshaped Nomis data."""

import pandas as pd

from nomisgeo.constants import (
    AGE_BANDS,
    AGE_CODE_OFFSET,
    AGE_TYPE_INDIVIDUAL,
    ALL_AGES,
    COB_BUCKETS_2011,
    ETHNIC_GROUP_SENTINEL,
    ETHNIC_GROUP_SEPARATOR,
    TENURE_DROPPED,
    TENURE_OTHER,
    TENURE_RENAMES,
)
from nomisgeo.errors import SchemaMismatch

AREA_COLUMNS = ("geography_code", "geography_name")
AREA_DATE_COLUMNS = (*AREA_COLUMNS, "date")


def _require(frame, columns, table):
    """Raise `SchemaMismatch` unless every column is in the frame."""

    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise SchemaMismatch(missing, table)


def _identifiers(frame):
    """Area (and date) columns present in a tidy table."""

    _require(frame, AREA_COLUMNS, "table")

    return [column for column in AREA_DATE_COLUMNS if column in frame.columns]


def split_ethnic_groups(rows, summarise=False):
    """
    Split detailed ethnic group labels into broad and detailed groups.

    Labels such as `"Asian/Asian British: Indian"` are split on `": "`
    into a broad and a detailed group. Any further pieces are dropped,
    so `"Other: Any other: Arab"` gives `"Any other"`. Labels with no
    separator, and the `"Ethnic group"` heading row, are not data and
    are dropped.

    Parameters
    ----------
    rows : pandas.DataFrame
        Observations filtered to a single measure, with columns
        `geography_code`, `geography_name`, `cell_name` and
        `obs_value`.
    summarise : bool, default False
        If `True`, detailed groups reported under several broad groups
        (e.g. `"White: Afghan"` and `"Asian: Afghan"`) are added
        together into a single row.

    Returns
    -------
    groups : pandas.DataFrame
        A row per detailed group per area with its `total`. If not
        summarised, there is also a `broad_group` column and rows are
        sorted by area name then detailed group. If summarised, rows
        are sorted by area name then by descending total so the
        largest group in each area comes first.
    """

    columns = (*AREA_COLUMNS, "cell_name", "obs_value")
    _require(rows, columns, "ethnic group table")

    records = []
    for code, name, label, value in rows[list(columns)].itertuples(
        index=False
    ):
        pieces = str(label).split(ETHNIC_GROUP_SEPARATOR)
        if len(pieces) < 2 or pieces[1] == ETHNIC_GROUP_SENTINEL:
            continue

        broad, detailed = pieces[:2]
        records.append((code, name, broad, detailed, value))

    groups = pd.DataFrame(
        records,
        columns=(*AREA_COLUMNS, "broad_group", "detailed_group", "total"),
    )

    if summarise is True:
        groups = groups.groupby(
            [*AREA_COLUMNS, "detailed_group"], as_index=False, sort=False
        )["total"].sum()
        groups = groups.sort_values(
            ["geography_name", "total"], ascending=[True, False]
        )
    else:
        groups = groups.sort_values(["geography_name", "detailed_group"])

    return groups.reset_index(drop=True)


def regroup_tenure(frame):
    """
    Regroup a tidy housing tenure table into canonical columns.

    Shared ownership and living rent free are added into `other`, the
    private rented sub-categories are dropped (their total is kept as
    `private_rented`) and the owned and social rented columns are
    renamed.

    Parameters
    ----------
    frame : pandas.DataFrame
        Tidy `KS402UK` table with cleaned column names. An empty table
        gives an empty result with the regrouped columns.

    Raises
    ------
    SchemaMismatch
        If any tenure category needed is missing from a non-empty
        table.

    Returns
    -------
    tenure : pandas.DataFrame
    """

    if frame.empty:
        columns = [*AREA_COLUMNS, *TENURE_RENAMES.values()]
        return pd.DataFrame(columns=[*columns, "private_rented", "other"])

    required = (*TENURE_OTHER, *TENURE_DROPPED, *TENURE_RENAMES)
    _require(frame, required, "tenure table")

    tenure = frame.copy()
    tenure["other"] = tenure[list(TENURE_OTHER)].sum(axis=1, skipna=False)
    tenure = tenure.drop(columns=[*TENURE_DROPPED, *TENURE_OTHER])

    return tenure.rename(columns=TENURE_RENAMES)


def bucket_country_of_birth(frame, buckets=None):
    """
    Sum detailed country of birth categories into broad buckets.

    Only the categories listed in `buckets` contribute. Anything else
    the upstream reports is ignored, so new ONS categories are left
    out until the bucket table is updated. A bucket none of whose
    categories are present is missing rather than zero.

    Parameters
    ----------
    frame : pandas.DataFrame
        Tidy `QS203UK` table with cleaned column names.
    buckets : nomisgeo.constants.CountryOfBirthBuckets, optional
        Versioned mapping of bucket name to the categories summed into
        it. Defaults to `COB_BUCKETS_2011`.

    Returns
    -------
    cob : pandas.DataFrame
        Area columns plus one column per bucket.
    """

    buckets = COB_BUCKETS_2011 if buckets is None else buckets

    cob = frame[_identifiers(frame)].copy()
    for bucket, categories in buckets.buckets.items():
        present = [column for column in categories if column in frame.columns]
        cob[bucket] = frame[present].sum(axis=1, min_count=1)

    return cob


def aggregate_age_bands(frame):
    """
    Add pairs of five-year age bands into ten-year bands.

    The last band, `aged_80_plus`, combines `aged_80_84` and
    `aged_85`.

    Parameters
    ----------
    frame : pandas.DataFrame
        Tidy table of five-year age bands with cleaned column names. An
        empty table gives an empty result with the ten-year bands.

    Raises
    ------
    SchemaMismatch
        If any five-year band is missing from a non-empty table.

    Returns
    -------
    bands : pandas.DataFrame
    """

    if frame.empty:
        return pd.DataFrame(columns=[*AREA_DATE_COLUMNS, *AGE_BANDS])

    sources = [column for pair in AGE_BANDS.values() for column in pair]
    _require(frame, sources, "age band table")

    bands = frame[_identifiers(frame)].copy()
    for band, (younger, older) in AGE_BANDS.items():
        bands[band] = frame[younger] + frame[older]

    return bands


def _individual_ages(rows):

    _require(
        rows,
        (*AREA_DATE_COLUMNS, "c_age_type", "c_age_name", "obs_value"),
        "age table",
    )

    return rows.loc[rows["c_age_type"] == AGE_TYPE_INDIVIDUAL]


def sum_age_range(rows, lower=0, upper=90):
    """
    Sum the population within an inclusive range of single years of age.

    Ages come from the Nomis age code, which is the age plus 101. The
    age 90 stands for everyone aged 90 and over.

    Parameters
    ----------
    rows : pandas.DataFrame
        Age observations filtered to a single measure.
    lower : int, default 0
        Lowest age to include.
    upper : int, default 90
        Highest age to include.

    Raises
    ------
    ValueError
        If `lower` is greater than `upper`.

    Returns
    -------
    population : pandas.DataFrame
        A row per area and date with the summed `pop`.
    """

    if lower > upper:
        raise ValueError(
            f"Lower bound ({lower}) must not exceed upper bound ({upper})"
        )

    _require(rows, ("c_age_code",), "age table")
    ages = _individual_ages(rows)
    ages = ages.loc[ages["c_age_name"] != ALL_AGES].copy()
    ages["age"] = pd.to_numeric(ages["c_age_code"]) - AGE_CODE_OFFSET
    ages = ages.loc[ages["age"].between(lower, upper)]

    population = ages.groupby(
        list(AREA_DATE_COLUMNS), as_index=False, sort=False, dropna=False
    )["obs_value"].sum()

    return population.rename(columns={"obs_value": "pop"})


def total_population(rows):
    """Pick out the all-ages total for each area and date."""

    ages = _individual_ages(rows)
    totals = ages.loc[ages["c_age_name"] == ALL_AGES]

    return totals[[*AREA_DATE_COLUMNS, "obs_value"]].reset_index(drop=True)
