"""Definiciones de modelos y configuración del ORM.

El almacén externo de eventos solo tiene una tabla, ``anpr_events``, con un
registro por cada XML de evento decodificado correctamente.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import NullPool

from anpr_listener.config import settings


class Base(DeclarativeBase):
    pass


# Sin pool: cada escritura abre y cierra su propia conexión.
engine = create_engine(settings.database_url, poolclass=NullPool, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


class AnprEvent(Base):
    """Evento ANPR decodificado desde el XML de la cámara."""

    __tablename__ = "anpr_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False)
    date_time: Mapped[str] = mapped_column(String(64), nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    license_plate: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    vehicle_type: Mapped[str] = mapped_column(String(64), nullable=False)
    vehicle_color: Mapped[str] = mapped_column(String(64), nullable=False)
    vehicle_speed: Mapped[str] = mapped_column(String(32), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
