from typing import Any

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración del motor de recordatorios utilizando Pydantic BaseSettings.
    Carga automáticamente las variables de entorno.
    """

    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Citenly Reminders API"
    PROJECT_DESCRIPTION: str = "Motor de recordatorios de citas e integración con Google Calendar"
    VERSION: str = "0.1.0"

    # PostgreSQL Database Settings
    DB_HOST: str = Field("localhost", description="Host de PostgreSQL")
    DB_PORT: int = Field(5432, description="Puerto de PostgreSQL")
    DB_NAME: str = Field("citenly", description="Nombre de la base de datos")
    DB_USER: str = Field("postgres", description="Usuario de PostgreSQL")
    DB_PASSWORD: str | None = Field(None, description="Contraseña de PostgreSQL")
    DB_ECHO: bool = Field(False, description="Log SQL queries (solo para debug)")

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(10, description="Tamaño del pool de conexiones")
    DB_MAX_OVERFLOW: int = Field(20, description="Máximo overflow del pool")
    DB_POOL_RECYCLE: int = Field(3600, description="Reciclar conexiones cada X segundos")
    DB_POOL_TIMEOUT: int = Field(30, description="Timeout para obtener conexión del pool")

    # YCloud WhatsApp API
    YCLOUD_API_BASE: str = Field("https://api.ycloud.com/v2", description="URL base de la API de YCloud")
    YCLOUD_USE_TEMPLATES: bool = Field(
        True, description="Enviar recordatorios como plantillas de WhatsApp (False = texto libre)"
    )
    YCLOUD_REMINDER_TEMPLATE: str = Field("appointment_reminder", description="Plantilla para recordatorios")
    YCLOUD_FOLLOWUP_TEMPLATE: str = Field("appointment_followup", description="Plantilla para seguimiento")
    YCLOUD_TEMPLATE_LANGUAGE: str = Field("es", description="Código de idioma de las plantillas")

    # Google OAuth / Calendar
    GOOGLE_CLIENT_ID: str | None = Field(None, description="Client ID de Google OAuth")
    GOOGLE_CLIENT_SECRET: str | None = Field(None, description="Client secret de Google OAuth")
    GOOGLE_TOKEN_ENDPOINT: str = Field("https://oauth2.googleapis.com/token", description="Endpoint de tokens OAuth")
    GOOGLE_CALENDAR_API_BASE: str = Field(
        "https://www.googleapis.com/calendar/v3", description="URL base de Google Calendar API"
    )
    GOOGLE_CALENDAR_ID: str = Field("primary", description="Calendario usado para los eventos")
    TOKEN_REFRESH_LEEWAY_MINUTES: int = Field(
        5, description="Minutos antes del vencimiento en que el token se considera por expirar"
    )

    # Reminder engine
    DEFAULT_CLINIC_TIMEZONE: str = Field(
        "America/Mexico_City", description="Zona horaria usada cuando la clínica no tiene una válida"
    )
    EXTERNAL_API_TIMEOUT: float = Field(8.0, description="Timeout en segundos para llamadas a APIs externas")
    REMINDER_MAX_CONCURRENCY: int = Field(5, description="Pares clínica/nivel procesados en paralelo")
    REMINDER_SEND_DELAY_SECONDS: float = Field(0.5, description="Pausa entre envíos para respetar rate limits")
    REMINDER_TRIGGER_RESPONSE_TIMEOUT: float = Field(
        25.0, description="Segundos que el trigger espera el reporte antes de responder 'in_progress'"
    )
    REMINDER_SCHEDULER_ENABLED: bool = Field(
        False, description="Ejecutar el ciclo horario dentro del proceso (alternativa al trigger externo)"
    )
    CRON_SECRET: str | None = Field(None, description="Bearer secret requerido por el trigger (opcional)")

    # Application Settings
    DEBUG: bool = Field(False, description="Modo de depuración")
    ENVIRONMENT: str = Field("production", description="Entorno de ejecución")
    LOG_LEVEL: str = Field("INFO", description="Nivel de logging")

    # Sentry Configuration
    SENTRY_DSN: str | None = Field(None, description="Sentry DSN for error tracking")

    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorar campos extras en lugar de generar un error
    )

    def __init__(self, **data: Any):
        super().__init__(**data)

    @field_validator("DB_POOL_SIZE")
    @classmethod
    def validate_pool_size(cls, v):
        if v < 1:
            raise ValueError("DB_POOL_SIZE must be at least 1")
        if v > 100:
            raise ValueError("DB_POOL_SIZE should not exceed 100")
        return v

    @field_validator("DB_MAX_OVERFLOW")
    @classmethod
    def validate_max_overflow(cls, v):
        if v < 0:
            raise ValueError("DB_MAX_OVERFLOW must be 0 or greater")
        if v > 200:
            raise ValueError("DB_MAX_OVERFLOW should not exceed 200")
        return v

    @field_validator("EXTERNAL_API_TIMEOUT")
    @classmethod
    def validate_external_timeout(cls, v):
        if v <= 0:
            raise ValueError("EXTERNAL_API_TIMEOUT must be positive")
        if v >= 10:
            raise ValueError("EXTERNAL_API_TIMEOUT should stay below 10 seconds")
        return v

    @field_validator("REMINDER_MAX_CONCURRENCY")
    @classmethod
    def validate_concurrency(cls, v):
        if v < 1:
            raise ValueError("REMINDER_MAX_CONCURRENCY must be at least 1")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        level = str(v).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level

    @computed_field
    @property
    def database_url(self) -> str:
        """Construye la URL de conexión a PostgreSQL"""
        if self.DB_PASSWORD:
            return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"postgresql://{self.DB_USER}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @computed_field
    @property
    def is_development(self) -> bool:
        """Determina si está en modo desarrollo"""
        return self.DEBUG or self.ENVIRONMENT.lower() in ["development", "dev", "local"]

    @computed_field
    @property
    def google_oauth_configured(self) -> bool:
        """Indica si hay credenciales de cliente OAuth para refrescar tokens"""
        return bool(self.GOOGLE_CLIENT_ID and self.GOOGLE_CLIENT_SECRET)


# Singleton para configuración
_settings_instance = None


def get_settings() -> Settings:
    """
    Retorna una instancia cacheada de la configuración.
    Esto evita cargar las variables de entorno múltiples veces.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
