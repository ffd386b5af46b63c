"""Tag model and the article <-> tag link table."""

from sqlmodel import Field, SQLModel


class Tag(SQLModel, table=True):
    """Tag name, unique and case-sensitive."""

    __tablename__ = "tags"
    __table_args__ = {"sqlite_autoincrement": True}

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(unique=True)


class ArticleTag(SQLModel, table=True):
    """
    Link table for Article <-> Tag many-to-many relationship.
    Rows disappear with either side through ON DELETE CASCADE.
    """

    __tablename__ = "article_tags"

    article_id: int = Field(foreign_key="articles.id", primary_key=True, ondelete="CASCADE")
    tag_id: int = Field(foreign_key="tags.id", primary_key=True, ondelete="CASCADE", index=True)
