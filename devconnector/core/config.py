"""Configuración central de la aplicación (Pydantic Settings).

- Carga variables desde .env en la raíz del proyecto.
- Agrupa ajustes por área: App, CORS, Mongo, Auth/JWT, Logging.
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resuelve el .env ubicado en la raíz del proyecto (independiente del CWD)
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    """Conjunto de variables de configuración con valores por defecto razonables.

    Nota: los valores pueden sobreescribirse vía variables de entorno (.env).
    """
    # App
    app_name: str = "DevConnector API (Perfiles)"
    api_prefix: str = "/api"

    # CORS (cliente React en localhost)
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]
    cors_allow_any: bool = False  # Permite todos los orígenes (usa con cuidado)

    # Mongo
    mongo_uri: str = "mongodb://localhost:27017"
    mongo_db: str = "devconnector"
    mongo_server_selection_timeout_ms: int = 15000
    # TLS relax options (dev only)
    mongo_tls: bool = False
    mongo_tls_insecure: bool = False  # allows invalid certs
    mongo_tls_allow_invalid_hostnames: bool = False
    # Aplica validadores e índices al arrancar
    mongo_bootstrap: bool = True

    # Auth / JWT (solo verificación; la emisión vive en el servicio de cuentas)
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"

    # Logging
    log_level: str = "INFO"

    # --- Utilidades derivadas / helpers ---
    @property
    def api_prefix_normalized(self) -> str:
        """Devuelve `api_prefix` con formato consistente.

        - Siempre inicia con '/'
        - Sin '/' final (excepto cuando es solo '/')
        - Si está vacío, devuelve ""
        """
        pref = (self.api_prefix or "").strip()
        if not pref:
            return ""
        if not pref.startswith('/'):
            pref = '/' + pref
        if len(pref) > 1 and pref.endswith('/'):
            pref = pref[:-1]
        return pref

    @property
    def jwt_configured(self) -> bool:
        return bool(self.jwt_secret)

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # no fallar si hay variables no usadas
    )


settings = Settings()
