"""Geography lookups from the ONS Open Geography Portal."""

import pandas as pd

from nomisgeo.api import APIClient, GeoportalAPI
from nomisgeo.constants import (
    BUA_SERVICE,
    ENGLAND,
    LOOKUP_COLUMNS,
    MSOA_NAMES_URL,
    OA_WARD_SERVICE_SUFFIXES,
    WARD_SERVICE_SUFFIXES,
)
from nomisgeo.errors import BatchLookupError, NomisGeoError, SchemaMismatch
from nomisgeo.reshape import clean_names, select_columns


def _yy(year):
    """Two-digit year used in Geoportal service and field names."""

    return str(year)[2:]


def assemble_lookup(region_table, nation_table):
    """
    Combine English region and UK nation lookups into one table.

    Both tables hold an area code, area name, parent code and parent
    name as their first four columns, whatever they are called. Rows of
    the nation table whose parent is England are dropped since the
    region table already covers England in more detail.

    Parameters
    ----------
    region_table : pandas.DataFrame
        Local authority to region lookup for England.
    nation_table : pandas.DataFrame
        Local authority to country lookup for the UK.

    Raises
    ------
    SchemaMismatch
        If either table has fewer than four columns.

    Returns
    -------
    lookup : pandas.DataFrame
        Columns `la_code`, `la_name`, `rn_code` and `rn_name`: English
        rows with their region, then the rest of the UK with its
        nation.
    """

    renamed = []
    for name, table in (("region", region_table), ("nation", nation_table)):
        if table.shape[1] < len(LOOKUP_COLUMNS):
            missing = LOOKUP_COLUMNS[table.shape[1]:]
            raise SchemaMismatch(missing, f"{name} table")

        table = table.iloc[:, : len(LOOKUP_COLUMNS)].copy()
        table.columns = LOOKUP_COLUMNS
        renamed.append(table)

    england, rest = renamed
    rest = rest.loc[rest["rn_name"] != ENGLAND]

    return pd.concat((england, rest), ignore_index=True)


def _fetch_lookup(service, where, columns, api=None):
    """Query a Geoportal service and keep an allow-list of columns."""

    api = api or GeoportalAPI()
    table = api.fetch_feature_table(service, where=where, fields=columns)

    return select_columns(table, columns)


def get_la2re(year, api=None):
    """
    Retrieve the local authority to region lookup for England.

    Tables exist from 2018. Local authorities are as at April of the
    year if boundaries changed, otherwise as at December.

    Parameters
    ----------
    year : int
        Year of the lookup, as YYYY.
    api : nomisgeo.GeoportalAPI, optional
        Client to use.

    Returns
    -------
    lookup : pandas.DataFrame
        Codes and names of each local authority and its region.
    """

    yy = _yy(year)
    columns = [f"LAD{yy}CD", f"LAD{yy}NM", f"RGN{yy}CD", f"RGN{yy}NM"]

    return _fetch_lookup(f"LAD{yy}_RGN{yy}_EN_LU", "1=1", columns, api)


def get_la2n(year, api=None):
    """
    Retrieve the local authority to country lookup for the UK.

    Tables exist from 2015.

    Parameters
    ----------
    year : int
        Year of the lookup, as YYYY.
    api : nomisgeo.GeoportalAPI, optional
        Client to use.

    Returns
    -------
    lookup : pandas.DataFrame
        Codes and names of each local authority and its country.
    """

    yy = _yy(year)
    columns = [f"LAD{yy}CD", f"LAD{yy}NM", f"CTRY{yy}CD", f"CTRY{yy}NM"]

    return _fetch_lookup(f"LAD{yy}_CTRY{yy}_UK_LU", "1=1", columns, api)


def get_la2rn(year, api=None):
    """
    Retrieve a local authority to region or nation lookup for the UK.

    English local authorities are matched to their region and the rest
    to their nation. Tables exist from 2018.

    Returns
    -------
    lookup : pandas.DataFrame
        Columns `la_code`, `la_name`, `rn_code` and `rn_name`.
    """

    api = api or GeoportalAPI()

    return assemble_lookup(get_la2re(year, api), get_la2n(year, api))


def get_ward2la(la, year, api=None):
    """
    Retrieve the ward to local authority lookup for one local authority.

    Data is available through the API for 2016 to 2020.

    Parameters
    ----------
    la : str
        ONS code of the local authority.
    year : int or str
        Year of the lookup, as YYYY.
    api : nomisgeo.GeoportalAPI, optional
        Client to use.

    Returns
    -------
    lookup : pandas.DataFrame
        Codes and names of each ward and the local authority.
    """

    yy = _yy(year)
    service = f"WD{yy}_LAD{yy}_UK_LU" + WARD_SERVICE_SUFFIXES.get(
        int(year), ""
    )
    columns = [f"WD{yy}CD", f"WD{yy}NM", f"LAD{yy}CD", f"LAD{yy}NM"]

    return _fetch_lookup(service, f"LAD{yy}CD = '{la}'", columns, api)


def get_ward2con(con, year, api=None):
    """
    Retrieve the ward to constituency lookup for one constituency.

    Data is available through the API for 2016 to 2020.

    Parameters
    ----------
    con : str
        ONS code of the parliamentary constituency.
    year : int or str
        Year of the lookup, as YYYY.
    api : nomisgeo.GeoportalAPI, optional
        Client to use.

    Returns
    -------
    lookup : pandas.DataFrame
        Codes and names of each ward and the constituency.
    """

    yy = _yy(year)
    service = f"WD{yy}_PCON{yy}_LAD{yy}_UK_LU" + WARD_SERVICE_SUFFIXES.get(
        int(year), ""
    )
    columns = [f"WD{yy}CD", f"WD{yy}NM", f"PCON{yy}CD", f"PCON{yy}NM"]

    return _fetch_lookup(service, f"PCON{yy}CD = '{con}'", columns, api)


def get_oa2ward_single(ward, year, api=None):
    """
    Retrieve the output area to ward and local authority lookup for a ward.

    Output areas are matched to wards on a best-fit basis. England and
    Wales only.

    Parameters
    ----------
    ward : str
        ONS code of the ward.
    year : int or str
        Year of the lookup, as YYYY.
    api : nomisgeo.GeoportalAPI, optional
        Client to use.

    Returns
    -------
    lookup : pandas.DataFrame
        Output area codes with the codes and names of their ward and
        local authority.
    """

    yy = _yy(year)
    service = f"OA11_WD{yy}_LAD{yy}_EW_LU" + OA_WARD_SERVICE_SUFFIXES.get(
        int(year), ""
    )
    columns = ["OA11CD", f"WD{yy}CD", f"WD{yy}NM", f"LAD{yy}CD", f"LAD{yy}NM"]

    return _fetch_lookup(service, f"WD{yy}CD = '{ward}'", columns, api)


def get_oa2bua_single(bua, api=None):
    """Retrieve the output area lookup for one 2011 Built Up Area."""

    columns = ["OA11CD", "BUA11CD", "BUA11NM"]

    return _fetch_lookup(BUA_SERVICE, f"BUA11CD = '{bua}'", columns, api)


def get_oa2buasd_single(buasd, api=None):
    """
    Retrieve the output area lookup for one Built Up Area Sub-division.

    Returns
    -------
    lookup : pandas.DataFrame
        Output area codes with the codes and names of their 2011 Built
        Up Area Sub-division and Built Up Area.
    """

    columns = ["OA11CD", "BUASD11CD", "BUASD11NM", "BUA11CD", "BUA11NM"]

    return _fetch_lookup(BUA_SERVICE, f"BUASD11CD = '{buasd}'", columns, api)


def _batch_lookup(fetch, units):
    """
    Run a single-unit lookup for every unit in turn.

    Every unit is attempted even if some fail, so that the error can
    say exactly which ones did.

    Raises
    ------
    BatchLookupError
        If any unit raised a package error, with the failures and the
        results of the units that succeeded.
    """

    units = [units] if isinstance(units, str) else list(units)

    frames, failures = [], {}
    for unit in units:
        try:
            frames.append(fetch(unit))
        except NomisGeoError as e:
            failures[unit] = e

    result = (
        pd.concat(frames, ignore_index=True) if frames else pd.DataFrame()
    )
    if failures:
        raise BatchLookupError(failures, result)

    return result


def get_oa2ward(wards, year, api=None):
    """
    Retrieve the output area to ward and local authority lookup.

    The lookup for every output area is too large for one request, so
    it is fetched one ward at a time, in order.

    Parameters
    ----------
    wards : str or sequence of str
        ONS codes of the wards.
    year : int or str
        Year of the lookup, as YYYY.
    api : nomisgeo.GeoportalAPI, optional
        Client to use.

    Raises
    ------
    BatchLookupError
        If any ward could not be retrieved.

    Returns
    -------
    lookup : pandas.DataFrame
    """

    api = api or GeoportalAPI()

    return _batch_lookup(
        lambda ward: get_oa2ward_single(ward, year, api), wards
    )


def get_oa2bua(buas, api=None):
    """Retrieve output area lookups for several Built Up Areas in turn."""

    api = api or GeoportalAPI()

    return _batch_lookup(lambda bua: get_oa2bua_single(bua, api), buas)


def get_oa2buasd(buasds, api=None):
    """Retrieve output area lookups for several BUA Sub-divisions in turn."""

    api = api or GeoportalAPI()

    return _batch_lookup(lambda buasd: get_oa2buasd_single(buasd, api), buasds)


def get_msoanames(api=None):
    """
    Retrieve the House of Commons Library MSOA names.

    Returns
    -------
    names : pandas.DataFrame
        For each 2011 MSOA in England and Wales, the ONS code and name,
        the Commons Library name (in Welsh too, for Welsh MSOAs) and the
        local authority, with cleaned column names.
    """

    api = api or APIClient()

    return clean_names(api.get_csv(MSOA_NAMES_URL))
