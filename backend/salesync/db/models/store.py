from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column

from salesync.db.base import Base
from salesync.db.models._mixins import TimestampMixin


class Store(Base, TimestampMixin):
    __tablename__ = "store"

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(10), unique=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
