"""
Agent tools: definitions and execution for tool-calling (agentic) mode.

Tools: get_current_date, search_waste_calendar, find_zone_collection_info.
Each returns a JSON string for the LLM.
"""

import json
import logging
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from app.core.config import LOCAL_TIMEZONE
from app.services.retrieval_service import search_calendar
from app.services.zone_service import resolve_zone

logger = logging.getLogger(__name__)

_DAYS_IT = ("lunedì", "martedì", "mercoledì", "giovedì", "venerdì", "sabato", "domenica")
_MONTHS_IT = (
    "gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno",
    "luglio", "agosto", "settembre", "ottobre", "novembre", "dicembre",
)

# OpenAI function-calling format: list of tool definitions
AGENT_TOOLS = [
    {
        "type": "function",
        "function": {
            "name": "get_current_date",
            "description": "Ottiene la data corrente (YYYY-MM-DD) per riferimenti temporali come \"oggi\", \"domani\", \"questa settimana\".",
            "parameters": {"type": "object", "properties": {}},
        },
    },
    {
        "type": "function",
        "function": {
            "name": "search_waste_calendar",
            "description": (
                "Cerca nel calendario della raccolta differenziata 2025. Per cercare cosa si butta in una data usa "
                "\"YYYY-MM-DD zona X Comune\" (es. \"2025-11-10 zona B Piombino Dese\"); per cercare quando si butta un "
                "rifiuto usa \"plastica zona X Comune\". Restituisce results (testi trovati) e found."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Query di ricerca con data o tipo di rifiuto, zona e comune.",
                    }
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": "find_zone_collection_info",
            "description": (
                "Trova la zona di raccolta (es. \"A\", \"B\", \"5\") per un indirizzo in un comune. Richiede SIA "
                "l'indirizzo SIA il comune: se l'utente non indica il comune chiediglielo prima. Usa poi la zona con "
                "search_waste_calendar. Restituisce zone oppure error."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "address": {
                        "type": "string",
                        "description": "Indirizzo (es. \"Via Roma\", \"Corso IV Novembre\", \"Piazza Garibaldi\")",
                    },
                    "municipality": {
                        "type": "string",
                        "description": "Comune (es. \"Cittadella\", \"Piombino Dese\")",
                    },
                },
                "required": ["address", "municipality"],
            },
        },
    },
]


def current_date(now: datetime | None = None) -> dict[str, str]:
    """Today's date as {date, dayOfWeek, formatted} in Italian, local service time."""
    now = now or datetime.now(ZoneInfo(LOCAL_TIMEZONE))
    day_of_week = _DAYS_IT[now.weekday()]
    formatted = f"{day_of_week} {now.day} {_MONTHS_IT[now.month - 1]} {now.year}"
    return {"date": now.strftime("%Y-%m-%d"), "dayOfWeek": day_of_week, "formatted": formatted}


def execute_tool(name: str, arguments: dict[str, Any]) -> str:
    """
    Execute a tool by name with the given arguments. Returns a JSON string result for the LLM.
    """
    args = arguments or {}
    logger.info("[tools] execute_tool name=%r arguments=%r", name, args)

    if name == "get_current_date":
        return json.dumps(current_date(), ensure_ascii=False)

    if name == "search_waste_calendar":
        query = (args.get("query") or "").strip()
        if not query:
            return json.dumps({"results": [], "found": False, "error": "query is required"})
        return json.dumps(search_calendar(query), ensure_ascii=False)

    if name == "find_zone_collection_info":
        address = (args.get("address") or "").strip()
        municipality = (args.get("municipality") or "").strip()
        if not address or not municipality:
            return json.dumps({"zone": "", "error": "Both address and municipality are required."})
        return json.dumps(resolve_zone(address, municipality).to_dict(), ensure_ascii=False)

    return json.dumps({"error": f"Unknown tool: {name}"})
