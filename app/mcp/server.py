"""
Minimal MCP-style tool server: exposes the agent's tools (zone lookup, calendar
search, current date) and vector-index stats through a standardized HTTP
interface, so they can be called and inspected without going through the LLM.
"""

import logging
from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

from app.agent.tools import current_date
from app.core.config import CALENDAR_COLLECTION, ZONES_COLLECTION
from app.services.retrieval_service import search_calendar
from app.services.vector_store import get_collection_stats
from app.services.zone_service import resolve_zone

logger = logging.getLogger(__name__)

# MCP tool schema for discovery / documentation
tools = [
    {
        "name": "find_zone_collection_info",
        "description": "Resolve the waste-collection zone for an address in a municipality",
        "input_schema": {"address": "string", "municipality": "string"},
    },
    {
        "name": "search_waste_calendar",
        "description": "Search the collection calendar (date or waste type, zone, municipality)",
        "input_schema": {"query": "string"},
    },
    {
        "name": "get_current_date",
        "description": "Current date in the service's local time zone",
        "input_schema": {},
    },
    {
        "name": "index_stats",
        "description": "Record counts and samples of the zones and calendar collections",
        "input_schema": {},
    },
]

mcp_router = APIRouter(tags=["mcp"])


@mcp_router.get("/tools", summary="MCP tool discovery")
def mcp_list_tools() -> dict[str, list[dict[str, Any]]]:
    return {"tools": tools}


class FindZoneRequest(BaseModel):
    """Request body for MCP tool find_zone_collection_info."""
    address: str
    municipality: str


@mcp_router.post(
    "/tools/find_zone_collection_info",
    summary="MCP tool: find_zone_collection_info",
    description="Resolve an address to its collection zone. Returns {zone} or {zone: \"\", error}.",
)
def mcp_find_zone(body: FindZoneRequest) -> dict[str, Any]:
    logger.info("MCP tool called: find_zone_collection_info")
    address = body.address.strip()
    municipality = body.municipality.strip()
    if not address or not municipality:
        return {"zone": "", "error": "Both address and municipality are required."}
    return resolve_zone(address, municipality).to_dict()


# --- search_waste_calendar ---

class SearchCalendarRequest(BaseModel):
    """Request body for MCP tool search_waste_calendar."""
    query: str = ""


@mcp_router.post(
    "/tools/search_waste_calendar",
    summary="MCP tool: search_waste_calendar",
    description="Semantic search over the collection calendar. Returns {results, found}.",
)
def mcp_search_calendar(body: SearchCalendarRequest) -> dict[str, Any]:
    logger.info("MCP tool called: search_waste_calendar")
    query = (body.query or "").strip()
    if not query:
        return {"results": [], "found": False}
    return search_calendar(query)


# --- get_current_date ---

@mcp_router.post("/tools/get_current_date", summary="MCP tool: get_current_date")
def mcp_current_date() -> dict[str, str]:
    logger.info("MCP tool called: get_current_date")
    return current_date()


# --- index_stats ---

@mcp_router.post(
    "/tools/index_stats",
    summary="MCP tool: index_stats",
    description="Record counts and sample texts for the zones and calendar collections.",
)
def mcp_index_stats() -> dict[str, Any]:
    logger.info("MCP tool called: index_stats")
    return {
        "zones": get_collection_stats(ZONES_COLLECTION),
        "calendar": get_collection_stats(CALENDAR_COLLECTION),
    }
