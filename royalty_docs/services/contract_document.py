"""
Contract document service.

Answers "give me this contract's PDF":

1. session check          -> UnauthorizedError
2. load contract          -> BadRequestError / NotFoundError
3. access gate            -> ForbiddenError
4. generated=true or no stored pdf_url -> synthesize
   (template overlay, legacy layout when the template is unavailable)
5. otherwise serve the stored upload -> NotFoundError when no candidate exists
"""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from royalty_docs.core.auth import SessionUser
from royalty_docs.models import Artist, Contract, ContractSplit, LabelSettings, User
from royalty_docs.services.access_gate import check_contract_access, require_session
from royalty_docs.services.document_context import DocumentContext, build_document_context
from royalty_docs.services.errors import BadRequestError, NotFoundError, TemplateUnavailableError
from royalty_docs.services.legacy_generator import render_legacy_document
from royalty_docs.services.split_ledger import (
    ContributorDirectory,
    SplitLedger,
    build_ledger,
    snapshot_references,
)
from royalty_docs.services.storage_paths import find_stored_document
from royalty_docs.services.template_renderer import render_from_template

logger = logging.getLogger(__name__)

MIME_BY_EXT = {
    ".pdf": "application/pdf",
}


@dataclass
class DocumentPayload:
    """A document ready to send: either generated bytes or a stored file."""
    filename: str
    media_type: str
    size: int
    content: Optional[bytes] = None
    path: Optional[Path] = None
    generated: bool = False

    def headers(self, download: bool = False) -> dict[str, str]:
        disposition = "attachment" if download else "inline"
        headers = {
            "Content-Length": str(self.size),
            "Content-Disposition": f'{disposition}; filename="{self.filename}"',
        }
        if self.generated:
            headers["Cache-Control"] = "no-store"
        return headers


def _uuids(values: Iterable[str]) -> List[uuid.UUID]:
    ids = []
    for value in values:
        try:
            ids.append(uuid.UUID(str(value)))
        except ValueError:
            logger.debug(f"Ignoring non-UUID reference {value!r} in featured artists")
    return ids


class ContractRepository:
    """Read-only queries needed to render a contract document."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_contract(self, contract_id: uuid.UUID) -> Optional[Contract]:
        query = (
            select(Contract)
            .options(
                selectinload(Contract.splits).selectinload(ContractSplit.user),
                selectinload(Contract.splits).selectinload(ContractSplit.artist).selectinload(Artist.owner),
                selectinload(Contract.user),
                selectinload(Contract.artist).selectinload(Artist.owner),
                selectinload(Contract.release),
                selectinload(Contract.demo),
            )
            .where(Contract.id == contract_id)
        )
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_users(self, user_ids: Iterable[str]) -> List[User]:
        ids = _uuids(user_ids)
        if not ids:
            return []
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return list(result.scalars().all())

    async def get_artists(self, artist_ids: Iterable[str]) -> List[Artist]:
        ids = _uuids(artist_ids)
        if not ids:
            return []
        result = await self.db.execute(
            select(Artist).options(selectinload(Artist.owner)).where(Artist.id.in_(ids))
        )
        return list(result.scalars().all())

    async def get_label_settings(self) -> Optional[LabelSettings]:
        result = await self.db.execute(select(LabelSettings).limit(1))
        return result.scalar_one_or_none()


def parse_contract_id(raw: Any) -> uuid.UUID:
    if isinstance(raw, uuid.UUID):
        return raw
    value = str(raw or "").strip()
    if not value:
        raise BadRequestError("Missing contract id")
    try:
        return uuid.UUID(value)
    except ValueError:
        raise BadRequestError("Invalid contract id")


def render_document(ctx: DocumentContext, template_path: Optional[str] = None) -> bytes:
    """Template overlay first, legacy layout when the template can't be used."""
    try:
        return render_from_template(ctx, template_path)
    except TemplateUnavailableError as e:
        logger.warning(f"{e}; using legacy layout for contract {ctx.contract_id}")
        return render_legacy_document(ctx)


class ContractDocumentService:
    """
    Resolves contract documents for a request.

    Stateless: one instance per request, nothing is cached or written.
    """

    def __init__(
        self,
        repository: ContractRepository,
        template_path: Optional[str] = None,
        storage_roots: Optional[Sequence[Tuple[str, bool]]] = None,
    ):
        self.repository = repository
        self.template_path = template_path
        self.storage_roots = storage_roots

    async def load_contract(self, user: Optional[SessionUser], raw_contract_id: Any) -> Contract:
        user = require_session(user)
        contract_id = parse_contract_id(raw_contract_id)

        contract = await self.repository.get_contract(contract_id)
        if contract is None:
            raise NotFoundError("Contract not found")

        check_contract_access(user, contract)
        return contract

    async def ledger_for(self, contract: Contract) -> SplitLedger:
        directory = ContributorDirectory.from_contract(contract)

        user_ids, artist_ids = snapshot_references(contract)
        missing_users = {i for i in user_ids if directory.user(i) is None}
        missing_artists = {i for i in artist_ids if directory.artist(i) is None}
        if missing_users:
            for user in await self.repository.get_users(missing_users):
                directory.add_user(user)
        if missing_artists:
            for artist in await self.repository.get_artists(missing_artists):
                directory.add_artist(artist)

        return build_ledger(contract, directory)

    async def get_ledger(self, user: Optional[SessionUser], raw_contract_id: Any) -> Tuple[Contract, SplitLedger]:
        contract = await self.load_contract(user, raw_contract_id)
        return contract, await self.ledger_for(contract)

    async def get_document(
        self,
        user: Optional[SessionUser],
        raw_contract_id: Any,
        generated: bool = False,
    ) -> DocumentPayload:
        contract = await self.load_contract(user, raw_contract_id)

        if generated or not contract.pdf_url:
            return await self.synthesize(contract)
        return self.serve_stored(contract)

    async def synthesize(self, contract: Contract) -> DocumentPayload:
        ledger = await self.ledger_for(contract)
        label_settings = await self.repository.get_label_settings()
        ctx = build_document_context(contract, ledger, label_settings)

        content = render_document(ctx, self.template_path)
        logger.info(f"Generated document for contract {contract.id} ({len(content)} bytes)")
        return DocumentPayload(
            filename=f"contract-{contract.id}-generated.pdf",
            media_type="application/pdf",
            size=len(content),
            content=content,
            generated=True,
        )

    def serve_stored(self, contract: Contract) -> DocumentPayload:
        path = find_stored_document(contract.pdf_url, self.storage_roots)
        if path is None:
            logger.warning(f"Stored document for contract {contract.id} not found: {contract.pdf_url!r}")
            raise NotFoundError("Contract file not found")

        return DocumentPayload(
            filename=f"contract-{contract.id}.pdf",
            media_type=MIME_BY_EXT.get(path.suffix.lower(), "application/octet-stream"),
            size=path.stat().st_size,
            path=path,
        )
