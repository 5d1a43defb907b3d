# backend/corsprobe/api/history.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from corsprobe import schemas
from corsprobe.db.session import get_db
from corsprobe.services import history

router = APIRouter(tags=["history"])


# ---- History ----


@router.get("/history", response_model=list[schemas.HistoryRead])
def list_history(db: Session = Depends(get_db)) -> list[schemas.HistoryRead]:
    return history.list_history(db)


@router.delete("/history", status_code=204)
def clear_history(db: Session = Depends(get_db)) -> Response:
    history.clear_history(db)
    return Response(status_code=204)


@router.delete("/history/{entry_id}", status_code=204)
def delete_history_entry(entry_id: str, db: Session = Depends(get_db)) -> Response:
    if not history.delete_history_entry(db, entry_id):
        raise HTTPException(status_code=404, detail="History entry not found")
    return Response(status_code=204)


# ---- Favorites ----


@router.get("/favorites", response_model=list[schemas.FavoriteRead])
def list_favorites(db: Session = Depends(get_db)) -> list[schemas.FavoriteRead]:
    return history.list_favorites(db)


@router.post("/favorites", response_model=schemas.FavoriteRead)
def add_favorite(
    payload: schemas.FavoriteCreate,
    db: Session = Depends(get_db),
) -> schemas.FavoriteRead:
    return history.add_favorite(
        db,
        url=payload.url,
        method=payload.method,
        headers=payload.headers,
        body=payload.body,
    )


@router.delete("/favorites", status_code=204)
def clear_favorites(db: Session = Depends(get_db)) -> Response:
    history.clear_favorites(db)
    return Response(status_code=204)


@router.delete("/favorites/{favorite_id}", status_code=204)
def remove_favorite(favorite_id: str, db: Session = Depends(get_db)) -> Response:
    if not history.remove_favorite(db, favorite_id):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return Response(status_code=204)
