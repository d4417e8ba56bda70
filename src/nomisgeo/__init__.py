"""Tidy UK census, population and geography data from Nomis and ONS."""


from .api import APIClient, GeoportalAPI, NomisAPI
from .census import (
    CensusTableResolver,
    c11_cob_uk,
    c11_ethdetail_ew,
    c11_ethgrps_ew,
    c11_ethgrps_uk,
    c11_tenure_uk,
    find_census_table,
    get_c11,
    get_c11_ew,
    get_c11_uk,
)
from .constants import (
    COB_BUCKETS_2011,
    GEOPORTAL_API_ROOT,
    NOMIS_API_ROOT,
    CountryOfBirthBuckets,
)
from .errors import (
    BatchLookupError,
    InvalidOutputMode,
    InvalidSex,
    NomisGeoError,
    SchemaMismatch,
    TableNotFound,
    UnknownAreaCode,
    UpstreamRejected,
    UpstreamUnavailable,
)
from .geography import GeoClassifier
from .lookups import (
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
from .options import CensusFamily, OutputMode, PopulationSource, Sex
from .population import get_age, pop_deciles, pop_range, pop_total
from .reference import (
    census_menu,
    con2rn,
    geo_types,
    la_changes,
    update_la_codes,
)
from .reshape import reshape

__version__ = "0.0.1"

__all__ = [
    "APIClient",
    "BatchLookupError",
    "COB_BUCKETS_2011",
    "CensusFamily",
    "CensusTableResolver",
    "CountryOfBirthBuckets",
    "GEOPORTAL_API_ROOT",
    "GeoClassifier",
    "GeoportalAPI",
    "InvalidOutputMode",
    "InvalidSex",
    "NOMIS_API_ROOT",
    "NomisAPI",
    "NomisGeoError",
    "OutputMode",
    "PopulationSource",
    "SchemaMismatch",
    "Sex",
    "TableNotFound",
    "UnknownAreaCode",
    "UpstreamRejected",
    "UpstreamUnavailable",
    "assemble_lookup",
    "c11_cob_uk",
    "c11_ethdetail_ew",
    "c11_ethgrps_ew",
    "c11_ethgrps_uk",
    "c11_tenure_uk",
    "census_menu",
    "con2rn",
    "find_census_table",
    "geo_types",
    "get_age",
    "get_c11",
    "get_c11_ew",
    "get_c11_uk",
    "get_la2n",
    "get_la2re",
    "get_la2rn",
    "get_msoanames",
    "get_oa2bua",
    "get_oa2bua_single",
    "get_oa2buasd",
    "get_oa2buasd_single",
    "get_oa2ward",
    "get_oa2ward_single",
    "get_ward2con",
    "get_ward2la",
    "la_changes",
    "pop_deciles",
    "pop_range",
    "pop_total",
    "reshape",
    "update_la_codes",
    "__version__",
]
