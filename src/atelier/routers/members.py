"""Member profiles and the member-owned gallery and course endpoints.

Every mutating route depends on :func:`require_owner`, so the bearer token
must belong to the member named in the path.
"""

import logging
import shutil
import time
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from .. import services
from ..auth import get_current_session, get_db, require_owner
from ..errors import ValidationError
from ..schemas import CourseFields, GalleryItemFields, MemberUpdate
from ..session import SessionToken


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["members"])

# stored extension by accepted content type; the client's suffix must be one of these
IMAGE_EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


@router.get("")
def list_members(db: Session = Depends(get_db)):
    return services.list_members(db)


@router.get("/search/{query}")
def search_members(query: str, db: Session = Depends(get_db)):
    return services.search_members(db, query)


@router.post("/upload-image")
def upload_image(
    request: Request,
    image: Optional[UploadFile] = File(None),
    session: SessionToken = Depends(get_current_session),
):
    """Store a profile or artwork image and return its public URL."""
    if image is None or not image.filename:
        raise ValidationError("No image file provided")
    extension = IMAGE_EXTENSIONS.get((image.content_type or "").lower())
    if extension is None or Path(image.filename).suffix.lower() not in IMAGE_SUFFIXES:
        raise ValidationError("Only PNG, JPEG, GIF and WebP images can be uploaded")

    settings = request.app.state.settings
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"
    with open(upload_dir / filename, "wb") as out:
        shutil.copyfileobj(image.file, out)

    logger.info("member %s uploaded %s", session.member_id, filename)
    return {"url": f"{settings.upload_url_prefix.rstrip('/')}/{filename}"}


@router.get("/{member_id}")
def get_member(member_id: str, db: Session = Depends(get_db)):
    """Return a member with their courses and gallery items."""
    return services.get_member_details(db, member_id)


@router.patch("/{member_id}", dependencies=[Depends(require_owner)])
def update_member(member_id: str, payload: MemberUpdate, db: Session = Depends(get_db)):
    return services.update_member(db, member_id, payload.model_dump(exclude_unset=True))


@router.post("/{member_id}/gallery", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_owner)])
def create_gallery_item(member_id: str, payload: GalleryItemFields, db: Session = Depends(get_db)):
    return services.create_gallery_item(db, member_id, payload.model_dump())


@router.patch("/{member_id}/gallery/{item_id}", dependencies=[Depends(require_owner)])
def update_gallery_item(
    member_id: str, item_id: int, payload: GalleryItemFields, db: Session = Depends(get_db)
):
    return services.update_gallery_item(db, member_id, item_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{member_id}/gallery/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_owner)],
)
def delete_gallery_item(member_id: str, item_id: int, db: Session = Depends(get_db)):
    services.delete_gallery_item(db, member_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{member_id}/courses", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_owner)])
def create_course(member_id: str, payload: CourseFields, db: Session = Depends(get_db)):
    """Create a course taught by the member."""
    return services.create_course(db, member_id, payload.model_dump())


@router.patch("/{member_id}/courses/{course_id}", dependencies=[Depends(require_owner)])
def update_course(member_id: str, course_id: int, payload: CourseFields, db: Session = Depends(get_db)):
    return services.update_course(db, member_id, course_id, payload.model_dump(exclude_unset=True))


@router.delete(
    "/{member_id}/courses/{course_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_owner)],
)
def delete_course(member_id: str, course_id: int, db: Session = Depends(get_db)):
    services.delete_course(db, member_id, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{member_id}/courses/{course_id}/teach", dependencies=[Depends(require_owner)])
def add_teaching_assignment(member_id: str, course_id: int, db: Session = Depends(get_db)):
    return services.add_teacher(db, member_id, course_id)


@router.delete(
    "/{member_id}/courses/{course_id}/teach",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_owner)],
)
def remove_teaching_assignment(member_id: str, course_id: int, db: Session = Depends(get_db)):
    services.remove_teacher(db, member_id, course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
