"""
Zone lookup: free-text address + municipality -> collection zone label.

Pipeline: embed "ADDRESS | MUNICIPALITY" -> top-3 search over the zones
collection -> keep same-municipality candidates -> best score must reach
ZONE_MIN_SCORE -> POST the address code to the ETRA endpoint -> scrape the
first zone from the returned HTML table.

Every failure is returned as a human-readable error string; nothing is retried.
"""

import logging
import re
from dataclasses import dataclass

import httpx

from app.core.config import (
    ETRA_API_TIMEOUT,
    ETRA_API_URL,
    ETRA_USER_TYPE,
    ZONE_MIN_SCORE,
    ZONE_SEARCH_TOP_K,
    ZONES_COLLECTION,
)
from app.services.vector_store import embed_texts, search

logger = logging.getLogger(__name__)

# One row of the ETRA table: waste type | zone | collection mode
_ZONE_ROW_RE = re.compile(
    r'<tr>\s*<td>([^<]+)</td>\s*<td class="center">([^<]+)</td>\s*<td>([^<]+)</td>\s*</tr>'
)
_NO_ZONE = "-"


@dataclass
class AddressRecord:
    """One line of the zones dataset: ADDRESS | MUNICIPALITY | ADDRESS_CODE | MUNICIPALITY_CODE."""

    address: str
    municipality: str
    address_code: str
    municipality_code: str

    @classmethod
    def parse(cls, text: str) -> "AddressRecord | None":
        parts = [p.strip() for p in (text or "").split("|")]
        if len(parts) < 4:
            return None
        return cls(parts[0], parts[1], parts[2], parts[3])


@dataclass
class ZoneLookupResult:
    zone: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return bool(self.zone) and self.error is None

    def to_dict(self) -> dict:
        out: dict = {"zone": self.zone}
        if self.error is not None:
            out["error"] = self.error
        return out


def _not_found(address: str, municipality: str) -> ZoneLookupResult:
    return ZoneLookupResult(
        error=(
            f'No address found for "{address}" in "{municipality}". '
            "Please verify the address and municipality name."
        )
    )


def select_best_match(
    candidates: list[dict], municipality: str
) -> tuple[AddressRecord, float] | None:
    """
    Among search hits, keep those whose stored municipality equals `municipality`
    (case-insensitive) and return the highest-scoring (record, score).
    Hits scoring 0 or less never match.
    """
    wanted = municipality.strip().upper()
    best: tuple[AddressRecord, float] | None = None
    best_score = 0.0
    for c in candidates:
        record = AddressRecord.parse((c.get("metadata") or {}).get("text", ""))
        if record is None or record.municipality.upper() != wanted:
            continue
        score = float(c.get("score", 0.0))
        if score > best_score:
            best, best_score = (record, score), score
    return best


def extract_zone(html: str) -> str:
    """Return the zone of the first table row whose zone column is not "-", else ""."""
    for match in _ZONE_ROW_RE.finditer(html or ""):
        zone = match.group(2).strip()
        if zone and zone != _NO_ZONE:
            return zone
    return ""


def fetch_collection_table(address_code: str, http_client: httpx.Client | None = None) -> httpx.Response:
    """POST the address code to the ETRA endpoint and return the raw response."""
    form = {
        "via": address_code,
        "civico": "",
        "barrato": "",
        "tipoUtenza": ETRA_USER_TYPE,
    }
    logger.info("[zone:fetch_collection_table] POST %s params=%r", ETRA_API_URL, form)
    if http_client is not None:
        return http_client.post(ETRA_API_URL, data=form, timeout=ETRA_API_TIMEOUT)
    with httpx.Client(timeout=ETRA_API_TIMEOUT) as client:
        return client.post(ETRA_API_URL, data=form)


def resolve_zone(
    address: str, municipality: str, http_client: httpx.Client | None = None
) -> ZoneLookupResult:
    """Resolve the collection zone for an address in a municipality."""
    logger.info("[zone:resolve_zone] IN  address=%r municipality=%r", address, municipality)
    try:
        normalized_address = (address or "").strip().upper()
        normalized_municipality = (municipality or "").strip().upper()
        query = f"{normalized_address} | {normalized_municipality}"

        embedding = embed_texts([query])[0]

        try:
            candidates = search(ZONES_COLLECTION, embedding, top_k=ZONE_SEARCH_TOP_K)
        except Exception as e:
            logger.error("[zone:resolve_zone] vector query failed: %s", e)
            return ZoneLookupResult(error=f"Database query failed: {e}")

        if not candidates:
            return _not_found(address, municipality)

        best = select_best_match(candidates, normalized_municipality)
        if best is None:
            logger.info("[zone:resolve_zone] no candidate in municipality=%s top=%s",
                        normalized_municipality,
                        [((c.get("metadata") or {}).get("text", "")[:80], c.get("score")) for c in candidates])
            return _not_found(address, municipality)

        record, score = best
        if score < ZONE_MIN_SCORE:
            logger.info("[zone:resolve_zone] low confidence score=%.4f match=%r", score, record.address)
            return ZoneLookupResult(
                error=(
                    f'Low confidence match ({score * 100:.1f}%) for "{address}" in "{municipality}". '
                    f'Found "{record.address}" instead. Please verify the address spelling.'
                )
            )

        logger.info("[zone:resolve_zone] match=%r score=%.4f address_code=%s",
                    record.address, score, record.address_code)
        if not record.address_code:
            return ZoneLookupResult(
                error="Address code not found. Try to be more specific with the address."
            )

        try:
            response = fetch_collection_table(record.address_code, http_client=http_client)
        except httpx.HTTPError as e:
            logger.warning("[zone:resolve_zone] ETRA call failed: %s", e)
            return ZoneLookupResult(error=f"ETRA API call failed: {str(e) or 'Timeout or network error'}")

        logger.info("[zone:resolve_zone] ETRA status=%d length=%d", response.status_code, len(response.text))
        if not response.is_success:
            return ZoneLookupResult(error=f"Error calling ETRA API: {response.status_code}")

        zone = extract_zone(response.text)
        if not zone:
            return ZoneLookupResult(error="No valid zone found for this address.")

        logger.info("[zone:resolve_zone] OUT zone=%s", zone)
        return ZoneLookupResult(zone=zone)
    except Exception as e:
        logger.exception("[zone:resolve_zone] unexpected failure")
        return ZoneLookupResult(error=f"Error: {e}")
