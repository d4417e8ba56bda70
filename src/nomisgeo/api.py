"""Module for connecting to the Nomis and ONS Geoportal APIs."""

import io
import json

import pandas as pd
import requests

from nomisgeo.constants import (
    GEOPORTAL_API_ROOT,
    GEOPORTAL_QUERY,
    NOMIS_API_ROOT,
    REQUEST_TIMEOUT,
)
from nomisgeo.errors import UpstreamRejected, UpstreamUnavailable
from nomisgeo.reshape import select_columns


class APIClient:
    """
    A thin wrapper around HTTP GET requests.

    Attributes
    ----------
    _current_data : dict or pandas.DataFrame or None
        The data returned by the most recent API call. If no call has
        been made or the last call failed, this is `None`.
    _current_url : str or None
        The URL of the most recent API call. If no call has been made,
        this is `None`.
    """

    def __init__(self):

        self._current_data = None
        self._current_url = None

    def _process_response(self, response):
        """
        Validate a response before its body is read.

        Parameters
        ----------
        response : requests.Response
            Response to be processed.

        Raises
        ------
        UpstreamUnavailable
            If the server failed with a 5xx status code.
        UpstreamRejected
            If the request was refused with any other unsuccessful
            status code.

        Returns
        -------
        response : requests.Response
            The same response, known to be successful.
        """

        status = response.status_code
        if 200 <= status <= 299:
            return response

        reason = f"status code {status}: {response.text[:200]}"
        if status >= 500:
            raise UpstreamUnavailable(self._current_url, reason)

        raise UpstreamRejected(self._current_url, reason)

    def get(self, url, params=None):
        """
        Make a call to the API and return the validated response.

        Parameters
        ----------
        url : str
            URL from which to retrieve data.
        params : dict, optional
            Query string parameters.

        Raises
        ------
        UpstreamUnavailable
            If the server cannot be reached, times out or fails.
        UpstreamRejected
            If the server refuses the request.

        Returns
        -------
        response : requests.Response
        """

        self._current_url = (
            requests.Request("GET", url, params=params).prepare().url
        )
        self._current_data = None
        try:
            response = requests.get(
                url, params=params, verify=True, timeout=REQUEST_TIMEOUT
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            raise UpstreamUnavailable(self._current_url, str(e)) from e

        return self._process_response(response)

    def get_json(self, url, params=None):
        """
        Retrieve and decode a JSON document.

        Raises
        ------
        UpstreamRejected
            If the body is not valid JSON.

        Returns
        -------
        data : dict
        """

        response = self.get(url, params)
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise UpstreamRejected(
                self._current_url, f"Error decoding data: {e}"
            ) from e

        self._current_data = data

        return data

    def get_csv(self, url, params=None):
        """
        Retrieve a CSV document as a data frame.

        An empty body gives an empty data frame.

        Returns
        -------
        data : pandas.DataFrame
        """

        response = self.get(url, params)
        text = response.text
        if not text.strip():
            data = pd.DataFrame()
        else:
            data = pd.read_csv(io.StringIO(text))

        self._current_data = data

        return data


class NomisAPI(APIClient):
    """A wrapper for the Nomis dataset API."""

    def search_tables(self, query_prefix):
        """
        Search the Nomis catalogue by dataset name.

        Parameters
        ----------
        query_prefix : str
            Name search term. A trailing `*` acts as a wildcard.

        Returns
        -------
        tables : pandas.DataFrame
            Data frame with an `id` and `name` column for each match, in
            the order Nomis returned them.
        """

        url = f"{NOMIS_API_ROOT}/def.sdmx.json"
        data = self.get_json(url, {"search": f"name-{query_prefix}"})

        keyfamilies = (data.get("structure") or {}).get("keyfamilies") or {}
        records = [
            (family["id"], _extract_name(family))
            for family in keyfamilies.get("keyfamily") or []
        ]

        return pd.DataFrame(records, columns=("id", "name"))

    def fetch_data(
        self, dataset_id, geography_codes, filters=None, columns=None
    ):
        """
        Retrieve observations from a Nomis dataset in long format.

        Parameters
        ----------
        dataset_id : str
            Nomis dataset identifier, e.g. `"NM_2002_1"`.
        geography_codes : sequence of str
            ONS nine-character codes to retrieve.
        filters : dict, optional
            Extra dimension filters, e.g. `{"date": "latest", "sex": 0}`.
        columns : sequence of str, optional
            Lowercase column names to select. Nomis is asked for these
            and the response is restricted to them.

        Returns
        -------
        data : pandas.DataFrame
            Data frame with lowercase column names.
        """

        url = f"{NOMIS_API_ROOT}/{dataset_id}.data.csv"
        params = {"geography": ",".join(geography_codes)}
        for key, value in (filters or {}).items():
            params[key] = str(value)
        if columns:
            params["select"] = ",".join(column.upper() for column in columns)

        data = self.get_csv(url, params)
        data.columns = [str(column).lower() for column in data.columns]

        if columns:
            data = select_columns(data, columns)

        return data


class GeoportalAPI(APIClient):
    """A wrapper for the ONS Open Geography Portal feature services."""

    def fetch_feature_table(self, service, where="1=1", fields="*"):
        """
        Query a feature service and return its attribute table.

        Parameters
        ----------
        service : str
            Name of the feature service, e.g. `"LAD21_RGN21_EN_LU"`.
        where : str
            SQL-like filter clause. Defaults to every feature.
        fields : str or sequence of str
            Fields to return. Defaults to all of them.

        Raises
        ------
        UpstreamRejected
            If the service answers with an error payload.

        Returns
        -------
        table : pandas.DataFrame
            One row per feature, one column per attribute.
        """

        if not isinstance(fields, str):
            fields = ",".join(fields)

        url = f"{GEOPORTAL_API_ROOT}/{service}/FeatureServer/0/query"
        params = {"where": where, "outFields": fields, **GEOPORTAL_QUERY}

        data = self.get_json(url, params)
        if "error" in data:
            error = data["error"]
            reason = error.get("message", str(error))
            raise UpstreamRejected(self._current_url, reason)

        features = data.get("features", [])
        records = [feature["attributes"] for feature in features]

        return pd.DataFrame.from_records(records)


def _extract_name(keyfamily):
    """Pull the display name out of a Nomis SDMX key family."""

    name = keyfamily.get("name", "")
    if isinstance(name, dict):
        return name.get("value", "")

    return name
