from uuid import uuid4

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import declarative_base, declared_attr

Base = declarative_base()


def new_id() -> str:
    """Opaque identifier assigned at insert."""
    return str(uuid4())


# --- Mixin ---
class TimestampMixin:
    """Mixin adding created_date and updated_date columns."""

    created_date = Column(DateTime, default=func.now(), nullable=False)
    updated_date = Column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )


# --- Base class for every model ---
class BaseMixin(TimestampMixin):
    """Base class combining a string ID with timestamps."""

    id = Column(String(36), primary_key=True, default=new_id)

    # Default table name: CamelCase class -> lowercase + 's'
    @declared_attr
    def __tablename__(cls):
        return cls.__name__.lower() + "s"

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={self.id})>"
