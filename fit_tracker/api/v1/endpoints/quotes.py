"""Motivational quotes."""

from fastapi import APIRouter, Depends, HTTPException

from fit_tracker.api.deps import get_storage
from fit_tracker.api.utils import changes_from
from fit_tracker.schemas.quote import QuoteCreate, QuoteImport, QuoteRead, QuoteUpdate
from fit_tracker.storage import Storage

router = APIRouter()


@router.get("", response_model=list[QuoteRead])
async def list_quotes(storage: Storage = Depends(get_storage)):
    return await storage.list_quotes()


@router.post("", response_model=QuoteRead, status_code=201)
async def create_quote(
    payload: QuoteCreate,
    storage: Storage = Depends(get_storage),
):
    return await storage.create_quote(payload.model_dump())


@router.get("/daily", response_model=QuoteRead | None)
async def daily_quote(storage: Storage = Depends(get_storage)):
    """Same active quote all day; rotates by day of year. null when there are none."""
    return await storage.daily_quote()


@router.post("/import", response_model=list[QuoteRead], status_code=201)
async def import_quotes(
    payload: QuoteImport,
    storage: Storage = Depends(get_storage),
):
    return await storage.import_quotes([q.model_dump() for q in payload.quotes])


@router.get("/{quote_id}", response_model=QuoteRead)
async def get_quote(
    quote_id: int,
    storage: Storage = Depends(get_storage),
):
    quote = await storage.get_quote(quote_id)
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


@router.put("/{quote_id}", response_model=QuoteRead)
async def update_quote(
    quote_id: int,
    payload: QuoteUpdate,
    storage: Storage = Depends(get_storage),
):
    quote = await storage.update_quote(quote_id, changes_from(payload, nullable=("author", "category")))
    if not quote:
        raise HTTPException(status_code=404, detail="Quote not found")
    return quote


@router.delete("/{quote_id}", status_code=204)
async def delete_quote(
    quote_id: int,
    storage: Storage = Depends(get_storage),
):
    if not await storage.delete_quote(quote_id):
        raise HTTPException(status_code=404, detail="Quote not found")
    return None
