"""
Contract Documents Router

Serves a contract's PDF: the uploaded file, or a document generated on
the fly from the contract record.
"""

import logging
from typing import Annotated, BinaryIO, Iterator, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from royalty_docs.core.auth import SessionUser, get_session_user
from royalty_docs.core.database import get_db
from royalty_docs.schemas.documents import ContributorResponse, LedgerResponse
from royalty_docs.services.contract_document import ContractDocumentService, ContractRepository
from royalty_docs.services.errors import DocumentError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files/contract", tags=["documents"])

CHUNK_SIZE = 64 * 1024


def get_contract_repository(db: Annotated[AsyncSession, Depends(get_db)]) -> ContractRepository:
    return ContractRepository(db)


def get_document_service(
    repository: Annotated[ContractRepository, Depends(get_contract_repository)],
) -> ContractDocumentService:
    return ContractDocumentService(repository)


def _iter_file(handle: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        handle.close()


def _http_error(e: DocumentError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.detail)


@router.get("/{contract_id}")
async def get_contract_document(
    contract_id: str,
    service: Annotated[ContractDocumentService, Depends(get_document_service)],
    user: Annotated[Optional[SessionUser], Depends(get_session_user)],
    generated: bool = False,
    download: bool = False,
):
    """
    Get a contract's PDF.

    Query params:
    - generated: always build the document from the contract record
    - download: send as attachment instead of inline
    """
    try:
        payload = await service.get_document(user, contract_id, generated=generated)
    except DocumentError as e:
        raise _http_error(e)
    except Exception:
        logger.exception(f"Failed to produce document for contract {contract_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to produce contract document",
        )

    headers = payload.headers(download=download)

    if payload.content is not None:
        return StreamingResponse(
            iter([payload.content]),
            media_type=payload.media_type,
            headers=headers,
        )

    try:
        handle = payload.path.open("rb")
    except OSError:
        logger.exception(f"Failed to open stored document {payload.path}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read contract file",
        )

    return StreamingResponse(
        _iter_file(handle),
        media_type=payload.media_type,
        headers=headers,
    )


@router.get("/{contract_id}/ledger", response_model=LedgerResponse)
async def get_contract_ledger(
    contract_id: str,
    service: Annotated[ContractDocumentService, Depends(get_document_service)],
    user: Annotated[Optional[SessionUser], Depends(get_session_user)],
):
    """Get the reconciled contributor split used on the generated document."""
    try:
        contract, ledger = await service.get_ledger(user, contract_id)
    except DocumentError as e:
        raise _http_error(e)

    primary = ledger.primary()
    return LedgerResponse(
        contract_id=contract.id,
        source=ledger.source,
        artist_share=contract.artist_share,
        label_share=contract.label_share,
        splits_total=ledger.split_check.total,
        splits_balanced=ledger.split_check.is_balanced,
        primary=primary.name if primary else None,
        contributors=[
            ContributorResponse(
                name=c.name,
                role=c.role,
                percentage_of_artist_share=c.percentage_of_artist_share,
                share_of_gross=c.share_of_gross(contract.artist_share),
                legal_name=c.legal_name,
                phone=c.phone,
                address=c.address,
                email=c.email,
            )
            for c in ledger.contributors
        ],
    )
