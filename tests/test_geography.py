"""Unit tests for the `nomisgeo.geography` module."""

import pandas as pd
import pytest
from hypothesis import given
from hypothesis import strategies as st

from nomisgeo import GeoClassifier, UnknownAreaCode
from nomisgeo.options import CensusFamily, PopulationSource

from .strategies import KEY, st_area_codes, st_unknown_area_codes

CLASSIFIER = GeoClassifier()

SMALL_PREFIXES = tuple(KEY.loc[KEY["nomis_source"] == "sa_based", "ent_code"])
LARGE_PREFIXES = tuple(KEY.loc[KEY["nomis_source"] == "la_based", "ent_code"])


def test_init():
    """Test that the classifier holds an entry for every key prefix."""

    assert set(CLASSIFIER.entries) == set(KEY["ent_code"])
    for prefix, entry in CLASSIFIER.entries.items():
        assert entry["ent_code"] == prefix


def test_init_custom_key():
    """Test that a classifier can be built from a caller's key."""

    key = pd.DataFrame(
        {
            "ent_code": ["X01"],
            "ent_name": ["Test areas"],
            "ent_type": ["Test"],
            "ent_coverage": ["England"],
            "nomis_source": ["sa_based"],
        }
    )

    classifier = GeoClassifier(key)

    assert classifier.classify(["X01000001"]) == {
        "X01000001": PopulationSource.SMALL_AREA
    }
    with pytest.raises(UnknownAreaCode):
        classifier.classify(["E07000178"])


@pytest.mark.parametrize(
    "code, source",
    (
        ("E01000001", PopulationSource.SMALL_AREA),
        ("E02000001", PopulationSource.SMALL_AREA),
        ("W01000001", PopulationSource.SMALL_AREA),
        ("E07000178", PopulationSource.LOCAL_AUTHORITY),
        ("E06000014", PopulationSource.LOCAL_AUTHORITY),
        ("E12000007", PopulationSource.LOCAL_AUTHORITY),
        ("E92000001", PopulationSource.LOCAL_AUTHORITY),
        ("K04000001", PopulationSource.LOCAL_AUTHORITY),
        ("E38000001", PopulationSource.SMALL_AREA),
        ("S16000001", PopulationSource.SMALL_AREA),
        ("E30000001", PopulationSource.SMALL_AREA),
        ("K01000001", PopulationSource.SMALL_AREA),
        ("E22000001", PopulationSource.LOCAL_AUTHORITY),
    ),
)
def test_classify_examples(code, source):
    """Test the classification of some well-known codes."""

    assert CLASSIFIER.classify([code]) == {code: source}


@given(st.lists(st_area_codes(), min_size=1))
def test_classify(codes):
    """Test every code is mapped to the source of its prefix."""

    sources = CLASSIFIER.classify(codes)

    assert set(sources) == set(codes)
    for code, source in sources.items():
        assert source.value == CLASSIFIER.entries[code[:3]]["nomis_source"]


@given(
    st.lists(st_area_codes(), max_size=5),
    st.lists(st_unknown_area_codes(), min_size=1, max_size=5, unique=True),
    st.randoms(),
)
def test_classify_unknown(known, unknown, random):
    """Test that every unknown code is listed in the error."""

    codes = known + unknown
    random.shuffle(codes)

    with pytest.raises(UnknownAreaCode) as error:
        CLASSIFIER.classify(codes)

    assert set(error.value.codes) == set(unknown)
    assert isinstance(error.value, ValueError)


@given(
    st.lists(
        st.one_of(
            st_area_codes(SMALL_PREFIXES), st_area_codes(LARGE_PREFIXES)
        ),
        unique=True,
    )
)
def test_partition(codes):
    """Test codes are split by source, keeping their input order."""

    small_area, local_authority = CLASSIFIER.partition(codes)

    assert small_area == [code for code in codes if code[:3] in SMALL_PREFIXES]
    assert local_authority == [
        code for code in codes if code[:3] in LARGE_PREFIXES
    ]


def test_partition_empty():
    """Test that no codes give two empty partitions."""

    assert CLASSIFIER.partition([]) == ([], [])


def test_entity():
    """Test the entry for a single code is returned as a copy."""

    entry = CLASSIFIER.entity("E07000178")

    assert entry["ent_code"] == "E07"
    assert entry["ent_coverage"] == "England"

    entry["ent_code"] = "foo"
    assert CLASSIFIER.entries["E07"]["ent_code"] == "E07"


def test_entity_unknown():
    """Test an unknown single code raises the classification error."""

    with pytest.raises(UnknownAreaCode, match="Z99000001"):
        CLASSIFIER.entity("Z99000001")


@pytest.mark.parametrize(
    "title, family",
    (
        ("KS201UK", CensusFamily.UK),
        ("QS203UK", CensusFamily.UK),
        ("KS201EW", CensusFamily.ENGLAND_WALES),
        ("ks404ew", CensusFamily.ENGLAND_WALES),
        ("KS208WA", CensusFamily.ENGLAND_WALES),
    ),
)
def test_table_family(title, family):
    """Test the table family is read from the title suffix."""

    assert GeoClassifier.table_family(title) is family


@pytest.mark.parametrize("title", ("KS201SC", "foo", ""))
def test_table_family_unknown(title):
    """Test titles without a known suffix raise an error."""

    with pytest.raises(ValueError, match="table family"):
        GeoClassifier.table_family(title)


@given(st.lists(st_area_codes(), unique=True))
def test_outside_family_uk(codes):
    """Test no codes fall outside the UK-wide tables."""

    assert CLASSIFIER.outside_family(codes, CensusFamily.UK) == []


def test_outside_family_england_wales():
    """Test Scottish and Northern Irish codes fall outside EW tables."""

    codes = ["E07000178", "S12000036", "W06000015", "N09000003", "K04000001"]

    outside = CLASSIFIER.outside_family(codes, CensusFamily.ENGLAND_WALES)

    assert outside == ["S12000036", "N09000003"]
