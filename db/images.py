"""
Queries over the image, tag and image_tag tables.

None of these functions commit: callers own the transaction so an image and
everything derived from it land together or not at all.
"""
import enum
from collections.abc import Iterable

from sqlalchemy import func
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from db.models import Image, ImageTag, Tag


class TagMatch(enum.Enum):
    ALL = "all"
    ANY = "any"


def _unique(names: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(names))


def _get_or_create_tags(session: Session, names: list[str]) -> list[Tag]:
    if not names:
        return []
    existing = {tag.name: tag for tag in session.exec(select(Tag).where(Tag.name.in_(names))).all()}
    tags = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            session.add(tag)
        tags.append(tag)
    return tags


def insert_image(session: Session, url: str, label: str, tags: Iterable[str]) -> Image:
    """Add an image with its tags and flush so the database assigns its id"""
    image = Image(url=url, label=label, tags=_get_or_create_tags(session, _unique(tags)))
    session.add(image)
    session.flush()
    return image


def get_image_by_id(session: Session, image_id: int) -> Image | None:
    return session.exec(select(Image).where(Image.id == image_id).options(selectinload(Image.tags))).one_or_none()


def list_images(session: Session) -> list[Image]:
    return list(session.exec(select(Image).options(selectinload(Image.tags)).order_by(Image.id)).all())


def list_images_by_tags(session: Session, tags: Iterable[str], mode: TagMatch) -> list[Image]:
    """
    ALL keeps images whose tag set is a superset of `tags`,
    ANY keeps images sharing at least one tag with it.
    """
    names = _unique(tags)
    if not names:
        # every set contains the empty set, none intersects it
        return list_images(session) if mode is TagMatch.ALL else []

    matching_ids = (
        select(ImageTag.image_id)
        .join(Tag, Tag.id == ImageTag.tag_id)
        .where(Tag.name.in_(names))
    )
    if mode is TagMatch.ALL:
        matching_ids = matching_ids.group_by(ImageTag.image_id).having(
            func.count(func.distinct(Tag.id)) == len(names)
        )

    statement = (
        select(Image)
        .where(Image.id.in_(matching_ids))
        .options(selectinload(Image.tags))
        .order_by(Image.id)
    )
    return list(session.exec(statement).all())
