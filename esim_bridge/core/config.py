"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.

Las credenciales de Shopify y Maya Mobile son obligatorias y no tienen
valores por defecto: la aplicación no arranca si falta alguna.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Se construye una sola vez al iniciar el proceso y se pasa
    explícitamente a clientes y servicios.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Maya-Shopify eSIM Integration"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)
    LOG_LEVEL: str = Field(default="INFO")

    # === CONFIGURACIÓN DE SHOPIFY ===
    SHOPIFY_STORE_URL: str = Field(..., description="Dominio de la tienda, ej: mi-tienda.myshopify.com")
    SHOPIFY_ACCESS_TOKEN: str = Field(..., description="Token de acceso de la Admin API")
    SHOPIFY_WEBHOOK_SECRET: str = Field(..., description="Secreto compartido para firmar webhooks")
    SHOPIFY_API_VERSION: str = Field(default="2024-07")

    # === CONFIGURACIÓN DE MAYA MOBILE ===
    MAYA_BASE_URL: str = Field(..., description="URL base de la API de Maya Mobile")
    MAYA_API_KEY: str = Field(..., description="API key enviada en el cuerpo de la activación")
    MAYA_API_SECRET: str = Field(..., description="Token enviado en el header X-Auth-Token")

    # === CONFIGURACIÓN DEL CATÁLOGO ===
    ESIM_PRODUCT_TYPE: str = Field(default="eSIM")
    ESIM_VENDOR: str = Field(default="Maya Mobile")

    # === CONFIGURACIÓN HTTP ===
    HTTP_TIMEOUT_SECONDS: float = Field(default=30.0)
    HTTP_CONNECT_TIMEOUT_SECONDS: float = Field(default=10.0)
    # La activación aprovisiona un recurso pagado: timeout propio y sin reintentos
    MAYA_ACTIVATION_TIMEOUT_SECONDS: float = Field(default=60.0)
    # Reintentos adicionales al primer intento; solo aplica a lecturas (GET)
    READ_MAX_RETRIES: int = Field(default=3)

    # === CONFIGURACIÓN DE SINCRONIZACIÓN ===
    ENABLE_SCHEDULED_SYNC: bool = Field(default=False)
    SYNC_INTERVAL_MINUTES: int = Field(default=60)
    CRON_SECRET: Optional[str] = Field(default=None)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)
    LOG_FORMAT: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # === CONFIGURACIÓN DE ALERTAS ===
    ALERT_EMAIL_ENABLED: bool = Field(default=False)
    ALERT_EMAIL_TO: Optional[str] = Field(default=None)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("SHOPIFY_STORE_URL")
    @classmethod
    def validate_shopify_url(cls, v):
        """Normaliza la URL de la tienda a https:// sin barra final."""
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("SHOPIFY_STORE_URL no puede estar vacío")
        if not v.startswith("https://") and not v.startswith("http://"):
            v = f"https://{v}"
        return v

    @field_validator("MAYA_BASE_URL")
    @classmethod
    def validate_maya_url(cls, v):
        """Remueve la barra final de la URL base de Maya."""
        v = v.strip().rstrip("/")
        if not v:
            raise ValueError("MAYA_BASE_URL no puede estar vacío")
        return v

    @field_validator("SHOPIFY_ACCESS_TOKEN", "SHOPIFY_WEBHOOK_SECRET", "MAYA_API_KEY", "MAYA_API_SECRET")
    @classmethod
    def validate_not_blank(cls, v, info):
        """Las credenciales no pueden ser cadenas vacías."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} no puede estar vacío")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("SYNC_INTERVAL_MINUTES")
    @classmethod
    def validate_positive(cls, v, info):
        """Valida enteros positivos."""
        if v < 1:
            raise ValueError(f"{info.field_name} debe ser mayor que 0")
        return v

    @field_validator("READ_MAX_RETRIES")
    @classmethod
    def validate_retries(cls, v):
        """Valida que la cantidad de reintentos no sea negativa."""
        if v < 0:
            raise ValueError("READ_MAX_RETRIES no puede ser negativo")
        return v

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def shopify_api_base_url(self) -> str:
        """Genera URL base de la Admin REST API de Shopify."""
        return f"{self.SHOPIFY_STORE_URL}/admin/api/{self.SHOPIFY_API_VERSION}"

    def get_shopify_headers(self) -> dict:
        """
        Obtiene headers para requests a Shopify.

        Returns:
            dict: Headers de autenticación
        """
        return {
            "X-Shopify-Access-Token": self.SHOPIFY_ACCESS_TOKEN,
            "Content-Type": "application/json",
            "User-Agent": self.APP_NAME,
        }

    def get_maya_headers(self) -> dict:
        """
        Obtiene headers para requests a Maya Mobile.

        Returns:
            dict: Headers de autenticación
        """
        return {
            "X-Auth-Token": self.MAYA_API_SECRET,
            "Content-Type": "application/json",
            "User-Agent": self.APP_NAME,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Solo se usa al arrancar el proceso; el resto del código recibe
    la instancia como parámetro.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def reload_settings() -> Settings:
    """
    Recarga la configuración (útil para testing).

    Returns:
        Settings: Nueva instancia de configuración
    """
    get_settings.cache_clear()
    return get_settings()
