"""Unit tests for the `nomisgeo.lookups` module."""

from unittest import mock

import pandas as pd
import pytest
from hypothesis import given
from hypothesis import strategies as st

from nomisgeo import (
    BatchLookupError,
    SchemaMismatch,
    UpstreamRejected,
    assemble_lookup,
    get_la2n,
    get_la2re,
    get_la2rn,
    get_msoanames,
    get_oa2bua,
    get_oa2bua_single,
    get_oa2buasd,
    get_oa2buasd_single,
    get_oa2ward,
    get_oa2ward_single,
    get_ward2con,
    get_ward2la,
)
from nomisgeo.constants import BUA_SERVICE, MSOA_NAMES_URL

REGIONS = pd.DataFrame(
    {
        "LAD21CD": ["E07000178", "E06000014"],
        "LAD21NM": ["Oxford", "York"],
        "RGN21CD": ["E12000008", "E12000003"],
        "RGN21NM": ["South East", "Yorkshire and The Humber"],
    }
)
NATIONS = pd.DataFrame(
    {
        "LAD21CD": ["E07000178", "E06000014", "W06000015", "S12000036"],
        "LAD21NM": ["Oxford", "York", "Cardiff", "City of Edinburgh"],
        "CTRY21CD": ["E92000001", "E92000001", "W92000004", "S92000003"],
        "CTRY21NM": ["England", "England", "Wales", "Scotland"],
    }
)


def _mock_api(*tables):
    """Make a mock Geoportal client giving one table per request."""

    api = mock.MagicMock()
    api.fetch_feature_table.side_effect = list(tables)

    return api


def test_assemble_lookup():
    """Test regions and nations combine with England only once."""

    region = REGIONS.iloc[:1]
    nation = NATIONS.iloc[[0, 2]]

    lookup = assemble_lookup(region, nation)

    assert lookup.columns.to_list() == [
        "la_code",
        "la_name",
        "rn_code",
        "rn_name",
    ]
    assert lookup.to_dict("records") == [
        {
            "la_code": "E07000178",
            "la_name": "Oxford",
            "rn_code": "E12000008",
            "rn_name": "South East",
        },
        {
            "la_code": "W06000015",
            "la_name": "Cardiff",
            "rn_code": "W92000004",
            "rn_name": "Wales",
        },
    ]


@given(st.integers(0, 3))
def test_assemble_lookup_ignores_extra_columns(extra):
    """Test only the first four columns of each table are used."""

    region = REGIONS.copy()
    nation = NATIONS.copy()
    for i in range(extra):
        region[f"extra_{i}"] = i
        nation[f"extra_{i}"] = i

    lookup = assemble_lookup(region, nation)

    assert len(lookup.columns) == 4
    assert lookup["la_code"].to_list() == [
        "E07000178",
        "E06000014",
        "W06000015",
        "S12000036",
    ]


@pytest.mark.parametrize("which", ("region", "nation"))
def test_assemble_lookup_too_few_columns(which):
    """Test a table with fewer than four columns is rejected."""

    tables = {"region": REGIONS, "nation": NATIONS}
    tables[which] = tables[which].iloc[:, :3]

    with pytest.raises(SchemaMismatch, match=f"{which} table"):
        assemble_lookup(tables["region"], tables["nation"])


def test_get_la2re():
    """Test the region lookup queries its service for the year."""

    api = _mock_api(REGIONS)

    lookup = get_la2re(2021, api)

    assert lookup.columns.to_list() == REGIONS.columns.to_list()

    api.fetch_feature_table.assert_called_once_with(
        "LAD21_RGN21_EN_LU",
        where="1=1",
        fields=["LAD21CD", "LAD21NM", "RGN21CD", "RGN21NM"],
    )


def test_get_la2n():
    """Test the nation lookup queries its service for the year."""

    api = _mock_api(NATIONS)

    get_la2n(2021, api)

    api.fetch_feature_table.assert_called_once_with(
        "LAD21_CTRY21_UK_LU",
        where="1=1",
        fields=["LAD21CD", "LAD21NM", "CTRY21CD", "CTRY21NM"],
    )


def test_get_la2rn():
    """Test the combined lookup covers the UK with England by region."""

    api = _mock_api(REGIONS, NATIONS)

    lookup = get_la2rn(2021, api)

    assert lookup["la_code"].to_list() == [
        "E07000178",
        "E06000014",
        "W06000015",
        "S12000036",
    ]
    assert lookup["rn_name"].to_list() == [
        "South East",
        "Yorkshire and The Humber",
        "Wales",
        "Scotland",
    ]


def test_get_la2re_drops_unexpected_columns():
    """Test extra attributes from the service are not passed on."""

    api = _mock_api(REGIONS.assign(ObjectId=[1, 2]))

    lookup = get_la2re(2021, api)

    assert "ObjectId" not in lookup.columns


@pytest.mark.parametrize(
    "year, service",
    (
        (2019, "WD19_LAD19_UK_LU"),
        (2020, "WD20_LAD20_UK_LU_v2"),
        ("2020", "WD20_LAD20_UK_LU_v2"),
    ),
)
def test_get_ward2la(year, service):
    """Test the ward lookup filters on the local authority."""

    yy = str(year)[2:]
    columns = [f"WD{yy}CD", f"WD{yy}NM", f"LAD{yy}CD", f"LAD{yy}NM"]
    api = _mock_api(pd.DataFrame(columns=columns))

    get_ward2la("E07000178", year, api)

    api.fetch_feature_table.assert_called_once_with(
        service, where=f"LAD{yy}CD = 'E07000178'", fields=columns
    )


@pytest.mark.parametrize("year", (2020, "2020"))
def test_get_ward2con(year):
    """Test the constituency lookup filters on the constituency."""

    columns = ["WD20CD", "WD20NM", "PCON20CD", "PCON20NM"]
    api = _mock_api(pd.DataFrame(columns=columns))

    get_ward2con("E14000873", year, api)

    api.fetch_feature_table.assert_called_once_with(
        "WD20_PCON20_LAD20_UK_LU_v2",
        where="PCON20CD = 'E14000873'",
        fields=columns,
    )


@pytest.mark.parametrize(
    "year, service",
    (
        (2017, "OA11_WD17_LAD17_EW_LU"),
        (2018, "OA11_WD18_LAD18_EW_LUv2"),
        (2020, "OA11_WD20_LAD20_EW_LU_v2"),
        ("2018", "OA11_WD18_LAD18_EW_LUv2"),
        ("2020", "OA11_WD20_LAD20_EW_LU_v2"),
    ),
)
def test_get_oa2ward_single(year, service):
    """Test the output area lookup picks the service for the year."""

    yy = str(year)[2:]
    columns = [
        "OA11CD",
        f"WD{yy}CD",
        f"WD{yy}NM",
        f"LAD{yy}CD",
        f"LAD{yy}NM",
    ]
    api = _mock_api(pd.DataFrame(columns=columns))

    get_oa2ward_single("E05000001", year, api)

    api.fetch_feature_table.assert_called_once_with(
        service, where=f"WD{yy}CD = 'E05000001'", fields=columns
    )


def test_get_oa2bua_single():
    """Test the built up area lookup filters on the area."""

    columns = ["OA11CD", "BUA11CD", "BUA11NM"]
    api = _mock_api(pd.DataFrame(columns=columns))

    get_oa2bua_single("E34004707", api)

    api.fetch_feature_table.assert_called_once_with(
        BUA_SERVICE, where="BUA11CD = 'E34004707'", fields=columns
    )


def test_get_oa2buasd_single():
    """Test the sub-division lookup filters on the sub-division."""

    columns = ["OA11CD", "BUASD11CD", "BUASD11NM", "BUA11CD", "BUA11NM"]
    api = _mock_api(pd.DataFrame(columns=columns))

    get_oa2buasd_single("E35001262", api)

    api.fetch_feature_table.assert_called_once_with(
        BUA_SERVICE, where="BUASD11CD = 'E35001262'", fields=columns
    )


def _oa_table(ward, n):
    """Make an output area to ward table with `n` rows."""

    return pd.DataFrame(
        {
            "OA11CD": [f"{ward}-{i}" for i in range(n)],
            "WD20CD": [ward] * n,
            "WD20NM": ["name"] * n,
            "LAD20CD": ["E07000178"] * n,
            "LAD20NM": ["Oxford"] * n,
        }
    )


@given(st.lists(st.integers(1, 5), min_size=1, max_size=5))
def test_get_oa2ward(sizes):
    """Test every ward is fetched in turn and the results stacked."""

    wards = [f"E0500000{i}" for i in range(len(sizes))]
    api = _mock_api(
        *(_oa_table(ward, size) for ward, size in zip(wards, sizes))
    )

    lookup = get_oa2ward(wards, 2020, api)

    assert len(lookup) == sum(sizes)
    assert lookup["WD20CD"].unique().tolist() == wards
    assert api.fetch_feature_table.call_count == len(wards)


def test_get_oa2ward_single_string():
    """Test a single ward can be given as a string."""

    api = _mock_api(_oa_table("E05000001", 2))

    lookup = get_oa2ward("E05000001", 2020, api)

    assert len(lookup) == 2


def test_get_oa2ward_partial_failure():
    """Test every ward is attempted and failures carry the partial result."""

    failure = UpstreamRejected("mock://test.com/", "Invalid query")
    api = _mock_api(
        _oa_table("E05000001", 2), failure, _oa_table("E05000003", 3)
    )

    with pytest.raises(BatchLookupError, match="E05000002") as error:
        get_oa2ward(["E05000001", "E05000002", "E05000003"], 2020, api)

    assert list(error.value.failures) == ["E05000002"]
    assert error.value.failures["E05000002"] is failure
    assert error.value.partial["WD20CD"].unique().tolist() == [
        "E05000001",
        "E05000003",
    ]
    assert api.fetch_feature_table.call_count == 3


def test_get_oa2ward_other_errors_propagate():
    """Test errors from outside the package are not collected."""

    api = _mock_api(KeyError("foo"))

    with pytest.raises(KeyError):
        get_oa2ward(["E05000001"], 2020, api)


def test_get_oa2bua():
    """Test several built up areas are fetched in turn."""

    columns = ["OA11CD", "BUA11CD", "BUA11NM"]
    api = _mock_api(
        pd.DataFrame([["a", "E34000001", "x"]], columns=columns),
        pd.DataFrame([["b", "E34000002", "y"]], columns=columns),
    )

    lookup = get_oa2bua(["E34000001", "E34000002"], api)

    assert lookup["OA11CD"].to_list() == ["a", "b"]


def test_get_oa2buasd():
    """Test several sub-divisions are fetched in turn."""

    columns = ["OA11CD", "BUASD11CD", "BUASD11NM", "BUA11CD", "BUA11NM"]
    api = _mock_api(
        pd.DataFrame(
            [["a", "E35000001", "x", "E34000001", "y"]], columns=columns
        ),
        pd.DataFrame(
            [["b", "E35000002", "z", "E34000001", "y"]], columns=columns
        ),
    )

    lookup = get_oa2buasd(["E35000001", "E35000002"], api)

    assert lookup["BUASD11CD"].to_list() == ["E35000001", "E35000002"]


def test_get_msoanames():
    """Test the MSOA names are fetched and their columns cleaned."""

    api = mock.MagicMock()
    api.get_csv.return_value = pd.DataFrame(
        {
            "msoa11cd": ["E02000001"],
            "msoa11nm": ["City of London 001"],
            "msoa11hclnm": ["City of London"],
            "Laname": ["City of London"],
        }
    )

    names = get_msoanames(api)

    assert names.columns.to_list() == [
        "msoa11cd",
        "msoa11nm",
        "msoa11hclnm",
        "laname",
    ]

    api.get_csv.assert_called_once_with(MSOA_NAMES_URL)
