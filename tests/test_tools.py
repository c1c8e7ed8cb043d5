"""
Unit tests for agent tool execution. Services behind the tools are patched.
"""

import json
from datetime import datetime
from unittest.mock import patch

from app.agent.tools import AGENT_TOOLS, current_date, execute_tool
from app.services.zone_service import ZoneLookupResult


def test_tool_definitions_names() -> None:
    names = [t["function"]["name"] for t in AGENT_TOOLS]
    assert names == ["get_current_date", "search_waste_calendar", "find_zone_collection_info"]


def test_current_date_in_italian() -> None:
    assert current_date(datetime(2025, 11, 10, 9, 30)) == {
        "date": "2025-11-10",
        "dayOfWeek": "lunedì",
        "formatted": "lunedì 10 novembre 2025",
    }
    assert current_date(datetime(2025, 3, 2))["dayOfWeek"] == "domenica"


def test_get_current_date_tool_returns_json() -> None:
    data = json.loads(execute_tool("get_current_date", {}))
    assert set(data) == {"date", "dayOfWeek", "formatted"}
    datetime.strptime(data["date"], "%Y-%m-%d")


def test_find_zone_tool_calls_resolver() -> None:
    with patch("app.agent.tools.resolve_zone", return_value=ZoneLookupResult(zone="B")) as mock_resolve:
        out = execute_tool("find_zone_collection_info", {"address": " Via Roma ", "municipality": "Cittadella"})
    assert json.loads(out) == {"zone": "B"}
    mock_resolve.assert_called_once_with("Via Roma", "Cittadella")


def test_find_zone_tool_reports_resolver_error() -> None:
    failure = ZoneLookupResult(error="No valid zone found for this address.")
    with patch("app.agent.tools.resolve_zone", return_value=failure):
        out = execute_tool("find_zone_collection_info", {"address": "Via Roma", "municipality": "Cittadella"})
    assert json.loads(out) == {"zone": "", "error": "No valid zone found for this address."}


def test_find_zone_tool_requires_municipality() -> None:
    with patch("app.agent.tools.resolve_zone") as mock_resolve:
        out = execute_tool("find_zone_collection_info", {"address": "Via Roma"})
    assert json.loads(out)["zone"] == ""
    mock_resolve.assert_not_called()


def test_search_calendar_tool() -> None:
    found = {"results": ["2025-11-10 zona B Piombino Dese: umido, vetro"], "found": True}
    with patch("app.agent.tools.search_calendar", return_value=found) as mock_search:
        out = execute_tool("search_waste_calendar", {"query": "2025-11-10 zona B Piombino Dese"})
    assert json.loads(out) == found
    mock_search.assert_called_once_with("2025-11-10 zona B Piombino Dese")


def test_search_calendar_tool_empty_query() -> None:
    with patch("app.agent.tools.search_calendar") as mock_search:
        out = execute_tool("search_waste_calendar", {"query": "  "})
    assert json.loads(out)["found"] is False
    mock_search.assert_not_called()


def test_unknown_tool() -> None:
    assert json.loads(execute_tool("web_search", {"query": "x"})) == {"error": "Unknown tool: web_search"}
