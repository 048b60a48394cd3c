# src/lookup/service.py — v1
"""Metadata lookup service: lookup id → DocumentRecord, cached.

Request:  POST {"lookupIds": [...]}
Response: {"results": [{"documentId", "contentId", "title", "status",
          "lookupId"}, ...]}

Response keys are matched leniently ("Document_ID", "documentid",
"DocumentId" are the same key). Every record is indexed under its
document id, content id and lookup id, case-insensitively, first one
wins. Requested ids with no record get a synthetic record carrying a
generated Content ID and no title.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Iterable

from linkrepair.core.models import DocumentRecord, LookupResponse
from linkrepair.lookup.content_id import generate_content_id, pad_content_id

if TYPE_CHECKING:
    from linkrepair.cache.base_cache_store import BaseCacheStore
    from linkrepair.network.base_client import BaseLinkClient

logger = logging.getLogger(__name__)

CONTENT_ID_KEY_PREFIX = "content_id_"
RECORD_KEY_PREFIX = "api_lookup_"

DEFAULT_CONTENT_ID_TTL_S = 24 * 3600.0
DEFAULT_RECORD_TTL_S = 30 * 60.0

SYNTHETIC_STATUS = "Missing"


class LookupServiceError(Exception):
    """The metadata service answered with something we cannot interpret."""


def _normalize_key(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


def _field(item: dict[str, Any], name: str, default: str = "") -> str:
    wanted = _normalize_key(name)
    for key, value in item.items():
        if _normalize_key(str(key)) == wanted:
            return "" if value is None else str(value)
    return default


def parse_lookup_response(
    payload: dict[str, Any], lookup_ids: Iterable[str],
) -> LookupResponse:
    """Match a lookup response against the ids that were requested.

    Raises:
        LookupServiceError: If the payload has no usable results list.
    """
    if not isinstance(payload, dict):
        raise LookupServiceError(f"Expected a JSON object, got {type(payload).__name__}")

    results: Any = None
    for key, value in payload.items():
        if _normalize_key(str(key)) == "results":
            results = value
            break
    if results is None:
        results = []
    if not isinstance(results, list):
        raise LookupServiceError("'results' must be a list")

    index: dict[str, DocumentRecord] = {}
    for item in results:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object lookup result: %r", item)
            continue
        record = DocumentRecord(
            document_id=_field(item, "documentId"),
            content_id=_field(item, "contentId"),
            title=_field(item, "title"),
            status=_field(item, "status", "Unknown") or "Unknown",
            lookup_id=_field(item, "lookupId"),
        )
        for key in (record.document_id, record.content_id, record.lookup_id):
            if key and key.lower() not in index:
                index[key.lower()] = record

    response = LookupResponse()
    for lookup_id in lookup_ids:
        if not lookup_id:
            continue
        record = index.get(lookup_id.lower())
        if record is None:
            response.missing.append(lookup_id)
            logger.debug("No record found for lookup id: %s", lookup_id)
        elif record.is_expired:
            response.expired[lookup_id] = record
        else:
            response.found[lookup_id] = record

    logger.info(
        "Lookup response matched: %d found, %d expired, %d missing (%d indexed keys)",
        len(response.found), len(response.expired), len(response.missing), len(index),
    )
    return response


class MetadataLookupService:
    """Resolve lookup ids to DocumentRecords through two TTL caches.

    Args:
        client: Network client used for the POST.
        content_id_cache: Cache for generated Content IDs.
        record_cache: Cache for DocumentRecords.
        api_base_url: Lookup endpoint. "" = offline, every record synthetic.
    """

    def __init__(
        self,
        client: BaseLinkClient,
        content_id_cache: BaseCacheStore,
        record_cache: BaseCacheStore,
        api_base_url: str = "",
        content_id_ttl_s: float = DEFAULT_CONTENT_ID_TTL_S,
        record_ttl_s: float = DEFAULT_RECORD_TTL_S,
    ) -> None:
        self._client = client
        self._content_id_cache = content_id_cache
        self._record_cache = record_cache
        self._api_base_url = api_base_url.strip()
        self._content_id_ttl_s = content_id_ttl_s
        self._record_ttl_s = record_ttl_s

    @property
    def offline(self) -> bool:
        return not self._api_base_url

    async def generate_content_id(self, lookup_id: str) -> str:
        """Cached deterministic Content ID for a lookup id ("" for "")."""
        if not lookup_id:
            return ""

        async def _generate() -> str:
            content_id = pad_content_id(generate_content_id(lookup_id))
            logger.debug("Generated Content ID '%s' for lookup id %s", content_id, lookup_id)
            return content_id

        return await self._content_id_cache.get_or_fetch(
            f"{CONTENT_ID_KEY_PREFIX}{lookup_id}", _generate, self._content_id_ttl_s,
        )

    async def get_document_record(self, lookup_id: str) -> DocumentRecord:
        """Authoritative record for lookup_id, or a synthetic fallback."""
        if not lookup_id:
            raise ValueError("lookup_id cannot be empty")

        async def _fetch() -> DocumentRecord:
            if self.offline:
                return await self._synthetic_record(lookup_id)
            response = await self.lookup([lookup_id])
            record = response.record_for(lookup_id)
            if record is None:
                return await self._synthetic_record(lookup_id)
            return record

        return await self._record_cache.get_or_fetch(
            f"{RECORD_KEY_PREFIX}{lookup_id}", _fetch, self._record_ttl_s,
        )

    async def lookup(self, lookup_ids: Iterable[str]) -> LookupResponse:
        """One POST for many ids, uncached."""
        ids = [i for i in dict.fromkeys(lookup_ids) if i]
        if not ids:
            return LookupResponse()
        if self.offline:
            return LookupResponse(missing=ids)

        logger.debug("Requesting metadata for %d lookup ids", len(ids))
        payload = await self._client.post_json(self._api_base_url, {"lookupIds": ids})
        return parse_lookup_response(payload, ids)

    async def prefetch(self, lookup_ids: Iterable[str]) -> int:
        """Warm the record cache for all uncached ids with a single request.

        Returns the number of records stored.
        """
        pending: list[str] = []
        for lookup_id in dict.fromkeys(lookup_ids):
            if not lookup_id:
                continue
            if not self._record_cache.contains(f"{RECORD_KEY_PREFIX}{lookup_id}"):
                pending.append(lookup_id)
        if not pending:
            return 0

        response = await self.lookup(pending)
        stored = 0
        for lookup_id in pending:
            record = response.record_for(lookup_id)
            if record is None:
                record = await self._synthetic_record(lookup_id)
            await self._record_cache.set(
                f"{RECORD_KEY_PREFIX}{lookup_id}", record, self._record_ttl_s,
            )
            stored += 1
        logger.info("Prefetched %d document records", stored)
        return stored

    async def _synthetic_record(self, lookup_id: str) -> DocumentRecord:
        content_id = await self.generate_content_id(lookup_id)
        logger.debug("Using synthetic record for lookup id %s", lookup_id)
        return DocumentRecord(
            document_id=f"doc-{content_id}",
            content_id=content_id,
            title="",
            status=SYNTHETIC_STATUS,
            lookup_id=lookup_id,
            is_synthetic=True,
        )
