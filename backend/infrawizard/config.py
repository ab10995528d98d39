from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite://"
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_upload_files: int = 5
    allowed_upload_types: list[str] = [
        "image/png",
        "image/jpeg",
        "image/jpg",
        "application/pdf",
    ]
    template_delay_seconds: float = 2.0
    llm_endpoint: str = "http://localhost:8080/completions"
    llm_timeout_seconds: float = 60.0
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"

    class Config:
        env_prefix = "INFRAWIZARD_"


settings = Settings()
