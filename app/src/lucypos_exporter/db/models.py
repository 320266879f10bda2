"""SQLAlchemy mappings of the tables the probes read."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, SmallInteger, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AuditEntry(Base):
    """A row of the POS application audit log."""

    __tablename__ = "audit"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<AuditEntry(id={self.id}, time={self.time})>"


class _BatchColumns:
    """Columns shared by the SymmetricDS batch tables."""

    batch_id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True)
    node_id: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str | None] = mapped_column(String(10))
    error_flag: Mapped[int] = mapped_column(SmallInteger, default=0, nullable=False)
    sql_message: Mapped[str | None] = mapped_column(Text)


class OutgoingBatch(_BatchColumns, Base):
    """A batch waiting to be sent to another node."""

    __tablename__ = "sym_outgoing_batch"

    def __repr__(self) -> str:
        return f"<OutgoingBatch(batch_id={self.batch_id}, status={self.status!r}, error_flag={self.error_flag})>"


class IncomingBatch(_BatchColumns, Base):
    """A batch received from another node."""

    __tablename__ = "sym_incoming_batch"

    def __repr__(self) -> str:
        return f"<IncomingBatch(batch_id={self.batch_id}, status={self.status!r}, error_flag={self.error_flag})>"
