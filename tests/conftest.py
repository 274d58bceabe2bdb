"""Pytest configuration and shared fixtures."""

import copy
import json
import re
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from airstats import AirstatsClient, Settings, TableNames
from airstats.api import create_app
from airstats.exceptions import UpstreamError
from airstats.models import Record


# --- Formula evaluation for the in-memory store ---

_FIND = re.compile(r'FIND\((".*"), ARRAYJOIN\(\{([^}]+)\}\)\)')
_LOWER = re.compile(r'LOWER\(\{([^}]+)\}\) = (".*")')
_EQUALS = re.compile(r'\{([^}]+)\} = (.+)')


def _split_arguments(text):
    """Split a formula argument list on top-level commas."""
    parts, current = [], []
    depth, in_string, escaped = 0, False, False
    for ch in text:
        if in_string:
            current.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    if current:
        parts.append("".join(current).strip())
    return parts


def evaluate_formula(formula, fields):
    """Evaluate the formula subset produced by airstats.formulas."""
    formula = formula.strip()
    for name, combine in (("AND", all), ("OR", any)):
        if formula.startswith(name + "(") and formula.endswith(")"):
            arguments = _split_arguments(formula[len(name) + 1:-1])
            return combine(evaluate_formula(arg, fields) for arg in arguments)

    match = _FIND.fullmatch(formula)
    if match:
        needle = json.loads(match.group(1))
        value = fields.get(match.group(2)) or []
        if not isinstance(value, list):
            value = [value]
        return needle in ", ".join(str(v) for v in value)

    match = _LOWER.fullmatch(formula)
    if match:
        return str(fields.get(match.group(1), "")).lower() == json.loads(match.group(2))

    match = _EQUALS.fullmatch(formula)
    if match:
        return fields.get(match.group(1)) == json.loads(match.group(2))

    raise ValueError(f"Unsupported formula: {formula}")


class FakeRecordsAPI:
    """In-memory stand-in for RecordsAPI."""

    def __init__(self, tables):
        self.tables = {
            name: [Record(id=r["id"], fields=r["fields"]) for r in records]
            for name, records in tables.items()
        }
        self.calls = []
        self.failing = set()

    def _check(self, table):
        if table in self.failing:
            raise UpstreamError(f"HTTP 503: table {table} unavailable")
        if table not in self.tables:
            raise UpstreamError(f"HTTP 404: table {table} not found")

    def list_records(self, table, view=None, formula=None, page_size=100):
        self.calls.append(("list", table, view, formula))
        self._check(table)
        records = self.tables[table]
        if formula:
            records = [r for r in records if evaluate_formula(formula, r.fields)]
        return [Record(id=r.id, fields=copy.deepcopy(r.fields)) for r in records]

    def get_record(self, table, record_id):
        self.calls.append(("get", table, record_id))
        self._check(table)
        for record in self.tables[table]:
            if record.id == record_id:
                return Record(id=record.id, fields=copy.deepcopy(record.fields))
        return None

    def find_first(self, table, formula):
        records = self.list_records(table, formula=formula)
        return records[0] if records else None

    def list_count(self, table):
        return sum(1 for call in self.calls if call[0] == "list" and call[1] == table)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def create_mock_response(data, status_code=200):
    """Create a mock requests response object."""
    mock_response = Mock()
    mock_response.status_code = status_code
    if isinstance(data, (dict, list)):
        mock_response.json.return_value = data
        mock_response.text = json.dumps(data)
    else:
        mock_response.json.side_effect = ValueError("No JSON object could be decoded")
        mock_response.text = data
    return mock_response


SAMPLE_TABLES = {
    "Categories": [
        {"id": "recCatEcon", "fields": {
            "Country": "Poland", "Secondary": "Economy", "SecondaryEN": "Economy",
            "SecondaryDE": "Wirtschaft", "SecondaryPL": "Gospodarka",
        }},
        {"id": "recCatHealth", "fields": {
            "Country": "Poland", "SecondaryEN": "Health", "SecondaryDE": "Gesundheit",
        }},
        {"id": "recCatEuEcon", "fields": {
            "Country": "European Union", "SecondaryEN": "Economy",
        }},
    ],
    "ContentHubs": [
        {"id": "recHubEnergy", "fields": {
            "Title": "Transformacja energetyczna", "TitleEN": "Energy transition",
            "TitleDE": "Energiewende", "Country": ["Poland"], "Datasets": ["recInfl"],
        }},
        {"id": "recHubLabour", "fields": {
            "TitleEN": "Labour market", "Country": ["European Union"], "Datasets": ["recEu"],
        }},
    ],
    "Comments": [
        {"id": "recCom1", "fields": {
            "AICommentEN": "Inflation slowed down.", "AICommentDE": "Die Inflation sank.",
        }},
    ],
    "Divisions": [
        {"id": "recDiv1", "fields": {
            "DivisionID": 7, "TitleEN": "Inflation in Mazovia",
            "DescriptionEN": "Regional consumer prices", "DataEN": "Year;Value",
            "Data": "2021;4.9\n2022;12.1", "AICommentEN": "Mazovia follows the national trend.",
            "Parent": ["recInfl"],
        }},
        {"id": "recDivOrphan", "fields": {
            "DivisionID": 8, "TitleEN": "Orphaned division", "Parent": ["recMissing"],
        }},
    ],
    "Metadata": [
        {"id": "recMeta1", "fields": {
            "DefinitionsEN": "Consumer price index definition",
            "DefinitionsDE": "Definition des Verbraucherpreisindex",
            "MethodologyEN": "Monthly price survey", "SourceNameEN": "Statistics Poland",
            "UnitEN": "%",
        }},
    ],
    "Datasets": [
        {"id": "recInfl", "fields": {
            "DataID": 101, "TitleEN": "Inflation", "TitleDE": "Inflationsrate",
            "DescriptionEN": "Consumer price index", "DataEN": "Year;Value",
            "DataDE": "Jahr;Wert", "Data": "2021;5.6\n2022;13.9",
            "Category": ["recCatEcon"], "CategoryID": ["recCatEcon"],
            "Comment": ["recCom1"], "ContentHub": ["recHubEnergy"],
            "ContentHubID": ["recHubEnergy"], "Metadata": ["recMeta1"],
            "UpdateFrequency": "Monthly", "UpdatedThere": "2024-05-01",
            "NextUpdateTime": "2024-06-01", "Source Name": "GUS",
        }},
        {"id": "recGdp", "fields": {
            "DataID": 102, "Title": "GDP", "Description": "Gross domestic product",
            "DataEN": "Year;Value;Note", "Data": "2021;6.9;final\n2022;5.3\n2023;0.2;N/A",
            "Category": ["recCatEcon"], "CategoryID": ["recCatEcon"],
            "AICommentEN": "GDP growth slowed.", "Unit": "% y/y",
            "UpdatedThere": "2024-06-15", "NextUpdateTime": "2024-09-15",
        }},
        {"id": "recBeds", "fields": {
            "DataID": 103, "TitleEN": "Hospital beds", "DescriptionEN": "Beds per 1000",
            "Category": ["recCatHealth"], "CategoryID": ["recCatHealth"],
            "UpdatedThere": "sometime soon",
        }},
        {"id": "recEu", "fields": {
            "DataID": 104, "TitleEN": "EU unemployment", "DescriptionEN": "Unemployment rate",
            "Category": ["recCatEuEcon"], "CategoryID": ["recCatEuEcon"],
            "ContentHub": ["recHubLabour"], "ContentHubID": ["recHubLabour"],
            "UpdatedThere": "2024-01-10",
        }},
        {"id": "recBlank", "fields": {
            "DataID": 105, "TitleEN": "   ", "Category": ["recCatEcon"],
            "CategoryID": ["recCatEcon"], "UpdatedThere": "2025-01-01",
        }},
    ],
}


@pytest.fixture
def tables():
    """Table names matching SAMPLE_TABLES."""
    return TableNames(
        datasets="Datasets",
        categories="Categories",
        content_hubs="ContentHubs",
        comments="Comments",
        divisions="Divisions",
        metadata="Metadata",
    )


@pytest.fixture
def store():
    """Fake records API loaded with a fresh copy of the sample tables."""
    return FakeRecordsAPI(copy.deepcopy(SAMPLE_TABLES))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def client(store, tables, clock):
    """AirstatsClient backed by the fake store."""
    return AirstatsClient(
        base_id="appTest",
        api_key="test-key",
        tables=tables,
        records=store,
        clock=clock,
    )


@pytest.fixture
def settings(tables):
    return Settings(
        api_key="test-key",
        base_id="appTest",
        tables=tables,
        private_api_key="s3cret",
    )


@pytest.fixture
def api(settings, client):
    """FastAPI TestClient over the fake-backed client."""
    return TestClient(create_app(settings=settings, client=client))
