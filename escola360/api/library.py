"""
library.py
----------
Routes for the user's saved plans ("Minha Biblioteca").

Features:
- List saved items, newest first.
- Fetch one item by id (404 when absent).
- Delete by id; deleting an unknown id is a no-op.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from escola360.api.deps import get_library_store
from escola360.models.library_model import LibraryItem
from escola360.services.library_store import LibraryStore, StorageError

router = APIRouter()


@router.get("", response_model=List[LibraryItem], response_model_exclude_none=True)
async def list_library(store: LibraryStore = Depends(get_library_store)):
    return store.list()


@router.get("/{item_id}", response_model=LibraryItem, response_model_exclude_none=True)
async def get_library_item(item_id: str, store: LibraryStore = Depends(get_library_store)):
    item = store.get(item_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Library item not found")
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_library_item(item_id: str, store: LibraryStore = Depends(get_library_store)):
    try:
        store.delete(item_id)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Library delete failed: {e}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
