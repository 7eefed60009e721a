from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import services
from ..auth import get_db


router = APIRouter(prefix="/gallery", tags=["gallery"])


@router.get("")
def list_gallery(db: Session = Depends(get_db)):
    """Return all gallery items with their artist, newest first."""
    return services.list_gallery(db)


@router.get("/search/{query}")
def search_gallery(query: str, db: Session = Depends(get_db)):
    return services.search_gallery(db, query)


@router.get("/{item_id}")
def get_gallery_item(item_id: int, db: Session = Depends(get_db)):
    return services.get_gallery_item(db, item_id)
