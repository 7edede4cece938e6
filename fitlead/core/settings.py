from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_ignore_empty=True, case_sensitive=False)

    # App
    app_name: str = "Fitlead API"
    debug: bool = False
    port: int = 3000
    log_level: str = "INFO"
    # Directory with the public site, served at "/" when set
    static_dir: Optional[str] = None

    # Database
    database_url: str = "sqlite:///./app.db"

    # Sessions
    session_secret: str = "change_me_local_secret"
    session_algorithm: str = "HS256"
    session_ttl_hours: int = 24
    # "database" keeps sessions across restarts, "memory" drops them
    session_backend: str = "database"

    # Cookies
    session_cookie_name: str = "fitlead_session"
    session_cookie_path: str = "/"
    session_cookie_secure: bool = False
    session_cookie_samesite: str = "lax"

    # Bootstrap admin
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    # Visits
    visits_recent_limit: int = 100


settings = Settings()
