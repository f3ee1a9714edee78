# image_queue/services/record_store.py
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import requests

from image_queue.core.logging import logger
from image_queue.schemas.record import RemoteRecord
from image_queue.services.transport import TransportError, send

# The REST API rejects batch writes of more than 10 records
MAX_BATCH_SIZE = 10

Sort = Sequence[Tuple[str, str]]


class RecordStoreError(Exception):
    """The remote record store rejected a request or could not be reached."""

    def __init__(self, operation: str, table: str, cause: TransportError):
        super().__init__(f"{operation} on '{table}' failed: {cause.message}")
        self.operation = operation
        self.table = table
        self.cause = cause

    @property
    def status_code(self) -> Optional[int]:
        return self.cause.status_code


def quote_formula_value(value: Any) -> str:
    """Render a Python value as a formula literal."""
    if isinstance(value, bool):
        return "TRUE()" if value else "FALSE()"
    if isinstance(value, (int, float)):
        return str(value)
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def build_formula(match: Optional[Mapping[str, Any]] = None, formula: Optional[str] = None) -> Optional[str]:
    """AND together field equalities and an optional raw formula."""
    clauses = [f"{{{field}}} = {quote_formula_value(value)}" for field, value in (match or {}).items()]
    if formula:
        clauses.append(formula)
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return f"AND({', '.join(clauses)})"


class RecordStoreClient:
    """
    Thin client for the record-oriented remote datastore (Airtable REST API).

    No caching and no transactions: every call is one or more HTTP requests,
    and any failure surfaces as RecordStoreError.
    """

    def __init__(
        self,
        api_key: str,
        base_id: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = f"{api_url.rstrip('/')}/{base_id}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        })

    def _table_url(self, table: str, record_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/{quote(table, safe='')}"
        if record_id:
            url = f"{url}/{quote(record_id, safe='')}"
        return url

    def _call(self, operation: str, table: str, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            response = send(self.session, method, url, timeout=self.timeout, **kwargs)
        except TransportError as exc:
            logger.bind(kind=exc.kind.value, status_code=exc.status_code).error(
                f"Record store {operation} on '{table}' failed: {exc.message}"
            )
            raise RecordStoreError(operation, table, exc) from exc
        return response.json()

    def list_records(
        self,
        table: str,
        match: Optional[Mapping[str, Any]] = None,
        formula: Optional[str] = None,
        sort: Optional[Sort] = None,
        max_records: Optional[int] = None,
    ) -> List[RemoteRecord]:
        """
        List records filtered by field equalities and/or a raw formula.

        Follows the `offset` cursor until the listing is exhausted or
        `max_records` rows have been returned.
        """
        params: List[Tuple[str, Any]] = []
        filter_formula = build_formula(match, formula)
        if filter_formula:
            params.append(("filterByFormula", filter_formula))
        for index, (field, direction) in enumerate(sort or ()):
            params.append((f"sort[{index}][field]", field))
            params.append((f"sort[{index}][direction]", direction))
        if max_records is not None:
            params.append(("maxRecords", max_records))

        records: List[RemoteRecord] = []
        offset = None
        while True:
            page_params = list(params)
            if offset:
                page_params.append(("offset", offset))
            data = self._call("list", table, "GET", self._table_url(table), params=page_params)
            records.extend(RemoteRecord(**raw) for raw in data.get("records", []))
            offset = data.get("offset")
            if not offset or (max_records is not None and len(records) >= max_records):
                break

        if max_records is not None:
            records = records[:max_records]
        return records

    def get_record(self, table: str, record_id: str) -> RemoteRecord:
        data = self._call("get", table, "GET", self._table_url(table, record_id))
        return RemoteRecord(**data)

    def create_record(self, table: str, fields: Dict[str, Any]) -> RemoteRecord:
        data = self._call("create", table, "POST", self._table_url(table), json={"fields": fields})
        return RemoteRecord(**data)

    def update_record(self, table: str, record_id: str, fields: Dict[str, Any]) -> RemoteRecord:
        data = self._call("update", table, "PATCH", self._table_url(table, record_id), json={"fields": fields})
        return RemoteRecord(**data)

    def update_records(self, table: str, updates: Iterable[Tuple[str, Dict[str, Any]]]) -> List[RemoteRecord]:
        """
        Batched PATCH of (record_id, fields) pairs.

        Sent as a single request when the batch fits the API limit, otherwise
        as consecutive chunks; a failing chunk aborts the remaining ones.
        """
        payload = [{"id": record_id, "fields": fields} for record_id, fields in updates]
        updated: List[RemoteRecord] = []
        for start in range(0, len(payload), MAX_BATCH_SIZE):
            chunk = payload[start:start + MAX_BATCH_SIZE]
            data = self._call("batch update", table, "PATCH", self._table_url(table), json={"records": chunk})
            updated.extend(RemoteRecord(**raw) for raw in data.get("records", []))
        return updated

    def delete_record(self, table: str, record_id: str) -> bool:
        data = self._call("delete", table, "DELETE", self._table_url(table, record_id))
        return bool(data.get("deleted", True))
