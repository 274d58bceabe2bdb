"""Tests for the main AirstatsClient class."""

import pandas as pd

from airstats import AirstatsClient, Settings, TableNames
from airstats.records import DEFAULT_API_URL, RecordsAPI


class TestAirstatsClient:
    """Test cases for AirstatsClient."""

    def test_initialization(self):
        """Test client initialization with defaults."""
        client = AirstatsClient("appBase", "key", TableNames(datasets="Datasets"))

        assert client.base_url == DEFAULT_API_URL
        assert isinstance(client.records, RecordsAPI)
        assert client.records.base_id == "appBase"
        assert client.cache.ttl_seconds == 3600
        assert client.assembler.country_views == {}

    def test_from_settings(self):
        """Test that settings flow into every component."""
        settings = Settings(
            api_key="key",
            base_id="appBase",
            tables=TableNames(datasets="Datasets", divisions="Divisions"),
            api_url="https://records.example/v0",
            country_views={"Poland": "Poland grid"},
            cache_ttl_seconds=60,
            request_timeout=5,
            max_pages=10,
        )

        client = AirstatsClient.from_settings(settings)

        assert client.records.base_url == "https://records.example/v0"
        assert client.records.timeout == 5
        assert client.records.max_pages == 10
        assert client.cache.ttl_seconds == 60
        assert client.assembler.country_views == {"Poland": "Poland grid"}

    def test_get_dataset_and_meta(self, client):
        detail = client.get_dataset("101")
        meta_only = client.get_dataset_meta("101")

        assert detail.data
        assert meta_only.data is None
        assert meta_only.meta == detail.meta

    def test_get_data_as_dataframe(self, client):
        """Test DataFrame export with the year column first."""
        df = client.get_data_as_dataframe("102")

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["year", "Value", "Note"]
        assert len(df) == 2
        assert df["Value"].tolist() == [6.9, 0.2]

    def test_get_data_as_dataframe_empty(self, client):
        df = client.get_data_as_dataframe("d8")

        assert isinstance(df, pd.DataFrame)
        assert df.empty

    def test_clear_cache(self, client, store):
        """Test that clearing the cache forces a reload."""
        client.list_countries()
        client.list_countries()
        assert store.list_count("Categories") == 1

        client.clear_cache()
        client.list_countries()

        assert store.list_count("Categories") == 2
