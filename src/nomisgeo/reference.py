"""Static reference tables shipped with the package."""

import functools
from importlib import resources

import pandas as pd


@functools.lru_cache(maxsize=None)
def _load(name):
    """Read a packaged CSV once per process."""

    source = resources.files("nomisgeo") / "data" / f"{name}.csv"
    with source.open("r", encoding="utf-8") as handle:
        table = pd.read_csv(handle, dtype=str)

    return table


def geo_types():
    """
    Key of the geography types referred to by ONS entity codes.

    Returns
    -------
    key : pandas.DataFrame
        One row per three-character entity prefix with columns
        `ent_code`, `ent_name`, `ent_type`, `ent_coverage` and
        `nomis_source` (`"sa_based"` or `"la_based"`).
    """

    return _load("geo_types").copy()


def census_menu():
    """2011 Census tables the `get_c11_*` functions can work with."""

    return _load("census_menu").copy()


def la_changes():
    """
    District local authority mergers in England from 2019 to 2021.

    Returns
    -------
    changes : pandas.DataFrame
        One row per former authority with its code and name, the code
        and name of the authority it merged into, the year of the
        change and the region both sit in.
    """

    changes = _load("la_changes").copy()
    changes["year"] = changes["year"].astype(int)

    return changes


def con2rn():
    """
    Westminster constituencies and the region or nation they lie in.

    Constituencies in England are matched to their region. Those in
    Wales, Scotland and Northern Ireland are matched to the nation.

    Returns
    -------
    lookup : pandas.DataFrame
        One row per constituency (2010 boundaries) with columns
        `con_code`, `con_name`, `rn_code` and `rn_name`.
    """

    return _load("con2rn").copy()


def update_la_codes(codes):
    """
    Replace former district codes with those of their successors.

    Codes that were never merged are returned unchanged.

    Parameters
    ----------
    codes : iterable of str
        Local authority codes, possibly from before 2019.

    Returns
    -------
    updated : list of str
        Codes in the same order with merged authorities replaced.
    """

    successors = dict(_load("la_changes")[["old_code", "new_code"]].values)

    return [successors.get(code, code) for code in codes]
