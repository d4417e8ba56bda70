"""Reshaping long-format API observations into tidy wide tables."""

import re
import unicodedata
import warnings

import pandas as pd

from nomisgeo.errors import SchemaMismatch
from nomisgeo.options import OutputMode


def select_columns(frame, expected):
    """
    Restrict a data frame to an allow-list of columns.

    Columns the upstream adds beyond `expected` are dropped without
    complaint. Expected columns that are absent are flagged with a
    warning rather than an error so that schema drift is visible.

    Parameters
    ----------
    frame : pandas.DataFrame
        Data as returned by an API.
    expected : sequence of str
        Columns to keep, in the order they should appear.

    Returns
    -------
    selected : pandas.DataFrame
        Copy of `frame` with the expected columns that are present. A
        frame with no columns at all becomes an empty frame holding
        every expected column.
    """

    expected = list(expected)
    if len(frame.columns) == 0:
        return pd.DataFrame(columns=expected)

    missing = [column for column in expected if column not in frame.columns]
    if missing:
        warnings.warn(
            "Expected column(s) absent from response: "
            + ", ".join(map(repr, missing)),
            UserWarning,
        )

    present = [column for column in expected if column in frame.columns]

    return frame[present].copy()


def _clean_name(name):
    """Convert a single label into lowercase snake case."""

    name = unicodedata.normalize("NFKD", str(name))
    name = name.encode("ascii", "ignore").decode("ascii")
    name = name.replace("%", "_percent_").replace("#", "_number_")
    name = re.sub(r"([a-z])([A-Z])", r"\1_\2", name)
    name = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")

    if not name:
        name = "x"
    elif name[0].isdigit():
        name = f"x{name}"

    return name


def clean_names(frame):
    """
    Normalise column names to lowercase snake case.

    Accents are transliterated, `%` becomes `percent`, any run of other
    characters becomes a single underscore and names starting with a
    digit gain an `x` prefix. Names that clash after cleaning are made
    unique with `_2`, `_3` and so on, in column order. Cleaning a frame
    twice gives the same names as cleaning it once.

    Parameters
    ----------
    frame : pandas.DataFrame
        Data frame to rename.

    Returns
    -------
    cleaned : pandas.DataFrame
        Copy of `frame` with clean column names.
    """

    names = []
    used = set()
    for column in frame.columns:
        name = base = _clean_name(column)
        suffix = 2
        while name in used:
            name = f"{base}_{suffix}"
            suffix += 1

        used.add(name)
        names.append(name)

    cleaned = frame.copy()
    cleaned.columns = names

    return cleaned


def filter_observations(
    rows,
    mode,
    region_filter=None,
    measure="measures_name",
    qualifier="rural_urban_name",
):
    """
    Keep the observations for one measure and, optionally, one qualifier.

    Parameters
    ----------
    rows : pandas.DataFrame
        Long-format observations.
    mode : OutputMode or str
        Measure to keep: counts (`"n"`) or percentages (`"p"`).
    region_filter : str, optional
        Value the `qualifier` column must hold, typically `"Total"` to
        drop rural and urban sub-splits from England and Wales tables.
    measure : str
        Name of the measure column. Dropped from the result.
    qualifier : str
        Name of the qualifier column. Dropped from the result when
        `region_filter` is given.

    Raises
    ------
    SchemaMismatch
        If the measure column, or the qualifier column when filtering
        on it, is missing.

    Returns
    -------
    filtered : pandas.DataFrame
    """

    mode = OutputMode.parse(mode)

    required = [measure] + ([qualifier] if region_filter is not None else [])
    missing = [column for column in required if column not in rows.columns]
    if missing:
        raise SchemaMismatch(missing, "observations table")

    filtered = rows.loc[rows[measure] == mode.label]
    if region_filter is not None:
        filtered = filtered.loc[filtered[qualifier] == region_filter]
        filtered = filtered.drop(columns=qualifier)

    filtered = filtered.drop(columns=measure)

    return filtered.reset_index(drop=True)


def pivot_categories(rows, category="cell_name", value="obs_value"):
    """
    Spread a category column into one column per category.

    Every other column identifies a row of the output. Rows and
    category columns keep the order in which they first appear, and an
    area missing a category gets `NaN` rather than zero.

    Parameters
    ----------
    rows : pandas.DataFrame
        Long-format observations for a single measure.
    category : str
        Column whose values become the new column names.
    value : str
        Column holding the values to spread.

    Raises
    ------
    SchemaMismatch
        If `category` or `value` are missing.

    Returns
    -------
    wide : pandas.DataFrame
    """

    missing = [
        column for column in (category, value) if column not in rows.columns
    ]
    if missing:
        raise SchemaMismatch(missing, "observations table")

    index = [
        column for column in rows.columns if column not in (category, value)
    ]
    rows = rows.drop_duplicates()
    if rows.empty:
        return rows[index].reset_index(drop=True)

    categories = list(pd.unique(rows[category]))
    keys = rows[index].drop_duplicates()

    wide = rows.pivot(index=index, columns=category, values=value)
    wide = wide.reindex(columns=categories)
    wide.columns.name = None

    wide = keys.merge(wide.reset_index(), on=index, how="left")

    return wide


def reshape(
    rows,
    mode,
    region_filter=None,
    category="cell_name",
    value="obs_value",
    measure="measures_name",
    qualifier="rural_urban_name",
):
    """
    Turn long-format observations into a tidy wide table.

    The rows are filtered to one measure (and qualifier), pivoted so
    that each category is a column, and the column names cleaned.

    Parameters
    ----------
    rows : pandas.DataFrame
        Long-format observations as returned by Nomis.
    mode : OutputMode or str
        Counts (`"n"`) or percentages (`"p"`).
    region_filter : str, optional
        Qualifier value to keep. See `filter_observations`.
    category, value, measure, qualifier : str
        Names of the respective columns in `rows`.

    Returns
    -------
    tidy : pandas.DataFrame
        One row per area (and date), one column per category. Empty if
        nothing survives the filters.
    """

    filtered = filter_observations(
        rows, mode, region_filter, measure, qualifier
    )
    wide = pivot_categories(filtered, category, value)

    return clean_names(wide)
