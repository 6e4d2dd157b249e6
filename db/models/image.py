from sqlmodel import SQLModel, Field, Relationship


class ImageTag(SQLModel, table=True):
    """Junction table pairing images with the tags detected in them"""
    __tablename__ = "image_tag"

    image_id: int | None = Field(default=None, foreign_key="image.id", primary_key=True)
    tag_id: int | None = Field(default=None, foreign_key="tag.id", primary_key=True)


class Tag(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True, unique=True)

    images: list["Image"] = Relationship(back_populates="tags", link_model=ImageTag)


class Image(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    label: str
    url: str

    tags: list[Tag] = Relationship(back_populates="images", link_model=ImageTag)

    @property
    def tag_names(self) -> list[str]:
        return sorted(tag.name for tag in self.tags)
