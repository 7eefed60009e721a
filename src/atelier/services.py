"""Service layer: data-store queries and the response shapes clients expect."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from .auth import hash_password, normalize_identifier, verify_password
from .errors import Forbidden, NotFound, Unauthenticated, store_operation
from .models import Course, CourseTeacher, GalleryItem, Member, User


logger = logging.getLogger(__name__)

MEMBER_FIELDS = (
    "id",
    "user_id",
    "name_he",
    "name_en",
    "role_he",
    "role_en",
    "bio_he",
    "bio_en",
    "image_url",
    "created_at",
)
TEACHER_FIELDS = ("id", "name_he", "name_en", "role_he", "role_en", "image_url")
ARTIST_FIELDS = ("id", "name_he", "name_en", "bio_he", "bio_en", "image_url")
COURSE_FIELDS = ("id", "name_he", "name_en", "description_he", "description_en", "created_at")
GALLERY_FIELDS = (
    "id",
    "artist_id",
    "title_he",
    "title_en",
    "description_he",
    "description_en",
    "image_url",
    "created_at",
)


def _pick(obj: Any, fields) -> Dict[str, Any]:
    return {field: getattr(obj, field) for field in fields}


def serialize_member(member: Member) -> Dict[str, Any]:
    """Public view of a member; the password hash never leaves the server."""
    return _pick(member, MEMBER_FIELDS)


def serialize_course(course: Course, with_teachers: bool = True) -> Dict[str, Any]:
    """Course columns plus ``title_*`` aliases of ``name_*`` for the frontend."""
    data = _pick(course, COURSE_FIELDS)
    data["title_he"] = course.name_he
    data["title_en"] = course.name_en
    if with_teachers:
        data["teachers"] = [_pick(teacher, TEACHER_FIELDS) for teacher in course.teachers]
    return data


def serialize_course_summary(course: Course) -> Dict[str, Any]:
    """The trimmed shape used by the course listing."""
    return {
        "id": course.id,
        "title_he": course.name_he,
        "title_en": course.name_en,
        "description_he": course.description_he,
        "description_en": course.description_en,
        "created_at": course.created_at,
        "teachers": [_pick(teacher, TEACHER_FIELDS) for teacher in course.teachers],
    }


def serialize_gallery_item(item: GalleryItem, with_artist: bool = True) -> Dict[str, Any]:
    data = _pick(item, GALLERY_FIELDS)
    if with_artist:
        data["artist"] = _pick(item.artist, ARTIST_FIELDS) if item.artist else None
    return data


def _contains(column, query: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    escaped = query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


def _require_member(session: Session, member_id: str) -> Member:
    member = session.query(Member).filter(Member.id == member_id).first()
    if member is None:
        raise NotFound("Member not found")
    return member


def _require_course(session: Session, course_id: int) -> Course:
    course = (
        session.query(Course)
        .options(selectinload(Course.teachers))
        .filter(Course.id == course_id)
        .first()
    )
    if course is None:
        raise NotFound("Course not found")
    return course


def _require_teacher(session: Session, member_id: str, course_id: int) -> None:
    link = (
        session.query(CourseTeacher)
        .filter(CourseTeacher.course_id == course_id, CourseTeacher.teacher_id == member_id)
        .first()
    )
    if link is None:
        raise Forbidden("Only a teacher of this course may change it")


# --------------------------------------------------------------------------
# authentication


@store_operation("authenticate")
def authenticate(session: Session, identifier: str, password: str) -> Optional[Member]:
    """Return the member matching the credentials, or ``None``.

    The identifier is tried as a user email first, then as a member id
    compared case- and hyphen-insensitively.
    """
    normalized = normalize_identifier(identifier)

    user = session.query(User).filter(func.lower(User.email) == normalized).first()
    if user is not None and verify_password(password, user.password_hash):
        member = (
            session.query(Member)
            .filter(Member.user_id == user.id)
            .order_by(Member.created_at)
            .first()
        )
        if member is not None:
            return member
        logger.warning("user %s has no member profile", user.id)

    compact = normalized.replace("-", "")
    candidates = (
        session.query(Member)
        .filter(func.replace(func.lower(Member.id), "-", "") == compact)
        .all()
    )
    if not candidates:
        verify_password(password, None)
    for member in candidates:
        if verify_password(password, member.credential.password_hash):
            return member
    return None


@store_operation("change password")
def change_password(session: Session, member_id: str, current_password: str, new_password: str) -> None:
    """Verify ``current_password`` and replace it in one transaction.

    The update only applies if the stored hash is still the one that was
    verified, so two concurrent changes cannot both succeed.
    """
    member = _require_member(session, member_id)
    model = User if member.user_id is not None else Member
    key = member.user_id if member.user_id is not None else member.id

    record = session.query(model).filter(model.id == key).with_for_update().first()
    if record is None or not verify_password(current_password, record.password_hash):
        raise Unauthenticated("Current password is incorrect")

    updated = (
        session.query(model)
        .filter(model.id == key, model.password_hash == record.password_hash)
        .update({model.password_hash: hash_password(new_password)}, synchronize_session=False)
    )
    if updated != 1:
        session.rollback()
        raise Unauthenticated("Current password is incorrect")
    session.commit()
    logger.info("password changed for member %s", member_id)


# --------------------------------------------------------------------------
# members


@store_operation("get member")
def get_member(session: Session, member_id: str) -> Dict[str, Any]:
    return serialize_member(_require_member(session, member_id))


@store_operation("list members")
def list_members(session: Session) -> List[Dict[str, Any]]:
    members = session.query(Member).order_by(Member.created_at.desc()).all()
    return [serialize_member(member) for member in members]


@store_operation("search members")
def search_members(session: Session, query: str) -> List[Dict[str, Any]]:
    members = (
        session.query(Member)
        .filter(
            or_(
                _contains(Member.name_he, query),
                _contains(Member.name_en, query),
                _contains(Member.role_he, query),
                _contains(Member.role_en, query),
                _contains(Member.bio_he, query),
                _contains(Member.bio_en, query),
            )
        )
        .order_by(Member.created_at.desc())
        .all()
    )
    return [serialize_member(member) for member in members]


@store_operation("get member details")
def get_member_details(session: Session, member_id: str) -> Dict[str, Any]:
    """Member record with the courses they teach, every course, and their gallery."""
    member = (
        session.query(Member)
        .options(selectinload(Member.courses), selectinload(Member.gallery_items))
        .filter(Member.id == member_id)
        .first()
    )
    if member is None:
        raise NotFound("Member not found")
    all_courses = session.query(Course).order_by(Course.created_at.desc()).all()

    data = serialize_member(member)
    data["teaching_courses"] = [serialize_course(c, with_teachers=False) for c in member.courses]
    data["all_courses"] = [serialize_course(c, with_teachers=False) for c in all_courses]
    data["gallery_items"] = [serialize_gallery_item(i, with_artist=False) for i in member.gallery_items]
    return data


@store_operation("update member")
def update_member(session: Session, member_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
    member = _require_member(session, member_id)
    for field, value in changes.items():
        setattr(member, field, value)
    session.commit()
    session.refresh(member)
    return serialize_member(member)


# --------------------------------------------------------------------------
# courses


@store_operation("list courses")
def list_courses(session: Session) -> List[Dict[str, Any]]:
    courses = (
        session.query(Course)
        .options(selectinload(Course.teachers))
        .order_by(Course.created_at.desc())
        .all()
    )
    return [serialize_course_summary(course) for course in courses]


@store_operation("get course")
def get_course(session: Session, course_id: int) -> Dict[str, Any]:
    return serialize_course(_require_course(session, course_id))


@store_operation("search courses")
def search_courses(session: Session, query: str) -> List[Dict[str, Any]]:
    courses = (
        session.query(Course)
        .options(selectinload(Course.teachers))
        .filter(
            or_(
                _contains(Course.name_he, query),
                _contains(Course.name_en, query),
                _contains(Course.description_he, query),
                _contains(Course.description_en, query),
            )
        )
        .order_by(Course.created_at.desc())
        .all()
    )
    return [serialize_course(course) for course in courses]


@store_operation("create course")
def create_course(session: Session, member_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """Create a course with ``member_id`` as its first teacher."""
    _require_member(session, member_id)
    course = Course(**fields)
    session.add(course)
    session.flush()
    session.add(CourseTeacher(course_id=course.id, teacher_id=member_id))
    session.commit()
    logger.info("member %s created course %s", member_id, course.id)
    return serialize_course(_require_course(session, course.id))


@store_operation("update course")
def update_course(session: Session, member_id: str, course_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    course = _require_course(session, course_id)
    _require_teacher(session, member_id, course_id)
    for field, value in changes.items():
        setattr(course, field, value)
    session.commit()
    return serialize_course(_require_course(session, course_id))


@store_operation("delete course")
def delete_course(session: Session, member_id: str, course_id: int) -> None:
    _require_course(session, course_id)
    _require_teacher(session, member_id, course_id)
    session.query(CourseTeacher).filter(CourseTeacher.course_id == course_id).delete(synchronize_session=False)
    session.query(Course).filter(Course.id == course_id).delete(synchronize_session=False)
    session.commit()
    logger.info("member %s deleted course %s", member_id, course_id)


@store_operation("add teacher")
def add_teacher(session: Session, member_id: str, course_id: int) -> Dict[str, Any]:
    """Record that ``member_id`` teaches ``course_id``; repeating it is harmless."""
    _require_member(session, member_id)
    _require_course(session, course_id)
    link = (
        session.query(CourseTeacher)
        .filter(CourseTeacher.course_id == course_id, CourseTeacher.teacher_id == member_id)
        .first()
    )
    if link is None:
        session.add(CourseTeacher(course_id=course_id, teacher_id=member_id))
        session.commit()
    return {"course_id": course_id, "teacher_id": member_id}


@store_operation("remove teacher")
def remove_teacher(session: Session, member_id: str, course_id: int) -> None:
    session.query(CourseTeacher).filter(
        CourseTeacher.course_id == course_id, CourseTeacher.teacher_id == member_id
    ).delete(synchronize_session=False)
    session.commit()


# --------------------------------------------------------------------------
# gallery


@store_operation("list gallery")
def list_gallery(session: Session) -> List[Dict[str, Any]]:
    items = (
        session.query(GalleryItem)
        .options(selectinload(GalleryItem.artist))
        .order_by(GalleryItem.created_at.desc())
        .all()
    )
    return [serialize_gallery_item(item) for item in items]


@store_operation("get gallery item")
def get_gallery_item(session: Session, item_id: int) -> Dict[str, Any]:
    item = (
        session.query(GalleryItem)
        .options(selectinload(GalleryItem.artist))
        .filter(GalleryItem.id == item_id)
        .first()
    )
    if item is None:
        raise NotFound("Gallery item not found")
    return serialize_gallery_item(item)


@store_operation("search gallery")
def search_gallery(session: Session, query: str) -> List[Dict[str, Any]]:
    items = (
        session.query(GalleryItem)
        .options(selectinload(GalleryItem.artist))
        .filter(
            or_(
                _contains(GalleryItem.title_he, query),
                _contains(GalleryItem.title_en, query),
                _contains(GalleryItem.description_he, query),
                _contains(GalleryItem.description_en, query),
            )
        )
        .order_by(GalleryItem.created_at.desc())
        .all()
    )
    return [serialize_gallery_item(item) for item in items]


@store_operation("create gallery item")
def create_gallery_item(session: Session, member_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    _require_member(session, member_id)
    item = GalleryItem(artist_id=member_id, **fields)
    session.add(item)
    session.commit()
    return get_gallery_item(session, item.id)


@store_operation("update gallery item")
def update_gallery_item(
    session: Session, member_id: str, item_id: int, changes: Dict[str, Any]
) -> Dict[str, Any]:
    item = (
        session.query(GalleryItem)
        .filter(GalleryItem.id == item_id, GalleryItem.artist_id == member_id)
        .first()
    )
    if item is None:
        raise NotFound("Gallery item not found")
    for field, value in changes.items():
        setattr(item, field, value)
    session.commit()
    return get_gallery_item(session, item_id)


@store_operation("delete gallery item")
def delete_gallery_item(session: Session, member_id: str, item_id: int) -> None:
    deleted = (
        session.query(GalleryItem)
        .filter(GalleryItem.id == item_id, GalleryItem.artist_id == member_id)
        .delete(synchronize_session=False)
    )
    session.commit()
    if not deleted:
        raise NotFound("Gallery item not found")
