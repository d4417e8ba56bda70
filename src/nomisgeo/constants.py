"""Configuration constants for the Nomis and Geoportal APIs."""

from collections import namedtuple

NOMIS_API_ROOT = "https://www.nomisweb.co.uk/api/v01/dataset"
GEOPORTAL_API_ROOT = (
    "https://services1.arcgis.com/ESMARspQHYMw9BZ9/arcgis/rest/services"
)
MSOA_NAMES_URL = (
    "https://houseofcommonslibrary.github.io/msoanames/MSOA-Names-Latest.csv"
)

REQUEST_TIMEOUT = 60

SMALL_AREA_DATASET = "NM_2010_1"
LOCAL_AUTHORITY_DATASET = "NM_2002_1"
ETHNIC_DETAIL_DATASET = "NM_575_1"

CENSUS_COLUMNS = (
    "geography_code",
    "geography_name",
    "cell_name",
    "measures_name",
    "obs_value",
)
CENSUS_EW_COLUMNS = (*CENSUS_COLUMNS, "rural_urban_name")
RURAL_URBAN_TOTAL = "Total"

AGE_COLUMNS = (
    "geography_code",
    "geography_name",
    "date",
    "c_age_type",
    "c_age_name",
    "c_age_code",
    "measures_name",
    "obs_value",
)
AGE_CODE_OFFSET = 101
AGE_TYPE_INDIVIDUAL = "Individual age"
AGE_TYPE_FIVE_YEAR = "5 year age band"
ALL_AGES = "All Ages"

ETHNIC_GROUP_SEPARATOR = ": "
ETHNIC_GROUP_SENTINEL = "Ethnic group"

TENURE_OTHER = (
    "shared_ownership_part_owned_and_part_rented",
    "living_rent_free",
)
TENURE_DROPPED = (
    "private_rented_private_landlord_or_letting_agency",
    "private_rented_other",
)
TENURE_RENAMES = {
    "owned": "owned_total",
    "owned_owned_outright": "owned_outright",
    "owned_owned_with_a_mortgage_or_loan": "owned_mortgage",
    "social_rented": "social_rent_total",
    "social_rented_rented_from_council_local_authority": "social_rent_council",
    "social_rented_other": "social_rent_ha",
}

AGE_BANDS = {
    "aged_0_9": ("age_0_4", "aged_5_9"),
    "aged_10_19": ("aged_10_14", "aged_15_19"),
    "aged_20_29": ("aged_20_24", "aged_25_29"),
    "aged_30_39": ("aged_30_34", "aged_35_39"),
    "aged_40_49": ("aged_40_44", "aged_45_49"),
    "aged_50_59": ("aged_50_54", "aged_55_59"),
    "aged_60_69": ("aged_60_64", "aged_65_69"),
    "aged_70_79": ("aged_70_74", "aged_75_79"),
    "aged_80_plus": ("aged_80_84", "aged_85"),
}

CountryOfBirthBuckets = namedtuple(
    "CountryOfBirthBuckets", ("version", "buckets")
)

# New ONS categories must be added here or they drop out of every bucket.
COB_BUCKETS_2011 = CountryOfBirthBuckets(
    version="2011",
    buckets={
        "uk": ("europe_united_kingdom_total",),
        "ireland": ("europe_ireland",),
        "other_eu": ("europe_other_europe_eu_countries_total",),
        "rest_europe": ("europe_other_europe_rest_of_europe_total",),
        "rest_world": (
            "africa_total",
            "antarctica_and_oceania_total",
            "middle_east_and_asia_total",
            "the_americas_and_the_caribbean_total",
            "other",
        ),
    },
)

GEOPORTAL_QUERY = {
    "returnGeometry": "false",
    "outSR": "4326",
    "f": "json",
}
BUA_SERVICE = "OA11_BUASD11_BUA11_LAD11_RGN11_EW_LU"
WARD_SERVICE_SUFFIXES = {2020: "_v2"}
OA_WARD_SERVICE_SUFFIXES = {2018: "v2", 2020: "_v2"}

ENGLAND = "England"
LOOKUP_COLUMNS = ("la_code", "la_name", "rn_code", "rn_name")
