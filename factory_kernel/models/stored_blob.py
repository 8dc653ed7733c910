"""
StoredBlob -- one named JSON document of the factory snapshot.

The blob store writes every collection as a row keyed by its blob name
(``factory_models``, ``factory_machines``, ...).  The document is kept as
JSON text so the stored shape stays identical to the portable format.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from factory_kernel.db.base import TimestampedBase


class StoredBlob(TimestampedBase):
    __tablename__ = "stored_blobs"

    name: Mapped[str] = mapped_column(String(64), primary_key=True)
    document: Mapped[str] = mapped_column(Text, nullable=False)
    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<StoredBlob {self.name} v{self.schema_version}>"
