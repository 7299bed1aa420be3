"""Interfaces the wizard needs from its host.

RecordGateway   reads drafts and writes the final record
DocumentStore   turns a staged file into a stored URL

The SQLAlchemy and local-disk implementations live in
firecert.services.records and firecert.services.storage; tests use
in-memory fakes.
"""

from typing import Any, Protocol

from firecert.wizard.slots import StagedFile


class RecordGateway(Protocol):
    async def fetch_draft(self, record_id: str) -> dict[str, Any] | None: ...

    async def find_pending_record(
        self,
        *,
        establishment_id: str | None,
        category: str | None,
        owner_id: str,
        exclude_id: str | None = None,
    ) -> Any | None: ...

    async def insert_record(self, attrs: dict[str, Any]) -> Any: ...

    async def update_record(self, record_id: str, attrs: dict[str, Any]) -> Any: ...


class DocumentStore(Protocol):
    async def upload_document(
        self, slug: str, staged: StagedFile, *, prefix: str | None = None,
    ) -> str: ...
