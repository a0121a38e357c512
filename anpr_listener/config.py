"""Configuración de ANPR Listener.

Este módulo define la clase de configuración que centraliza los parámetros
principales del servicio de ingesta. En producción, las variables se leen del
entorno (sistema o servicio de secrets). En desarrollo se puede usar un archivo
`.env`, que pydantic-settings carga automáticamente.
"""
from __future__ import annotations

import logging
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Clase de configuración para toda la aplicación.

    Los valores se obtienen por orden de prioridad de pydantic-settings:
    argumentos directos, variables de entorno y el archivo `.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    listen_host: Optional[str] = Field(
        None,
        description="Dirección de escucha; si no se indica se usa la IPv4 local",
    )
    listen_port: int = Field(9091, description="Puerto TCP de escucha de las cámaras")
    recv_chunk_size: int = 4096
    socket_timeout_seconds: Optional[float] = Field(
        None,
        description="Timeout de inactividad por conexión; None espera al cierre del peer",
    )

    images_dir: str = Field(
        "data/images/lpr_images",
        description="Directorio donde se guardan las imágenes ANPR",
    )
    xml_logs_dir: str = Field(
        "data/xml/lpr_logs",
        description="Directorio donde se guardan los XML de eventos",
    )
    sanitize_filenames: bool = Field(
        False,
        description="Usar solo el basename del filename declarado por la cámara",
    )

    sink_enabled: bool = True
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "anpr_listener"
    db_user: str = "anpr"
    db_password: str = "changeme"
    database_url_override: Optional[str] = Field(None, validation_alias="DATABASE_URL")

    log_level: str = "INFO"

    @property
    def IMAGES_DIR(self) -> str:
        """Alias en mayúsculas para compatibilidad con scripts auxiliares."""

        return self.images_dir

    @property
    def XML_LOGS_DIR(self) -> str:
        """Alias en mayúsculas para compatibilidad con scripts auxiliares."""

        return self.xml_logs_dir

    @property
    def LISTEN_PORT(self) -> int:
        return self.listen_port

    @property
    def database_url(self) -> str:
        """Construye la URL de conexión a PostgreSQL para SQLAlchemy."""

        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+psycopg2://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )


settings = Settings()
