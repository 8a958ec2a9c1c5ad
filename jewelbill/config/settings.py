from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="jewelbill", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/jewelbill",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )

    # Billing defaults
    DEFAULT_CGST_PCT: float = Field(default=1.5, validation_alias=AliasChoices("DEFAULT_CGST_PCT", "default_cgst_pct"))
    DEFAULT_SGST_PCT: float = Field(default=1.5, validation_alias=AliasChoices("DEFAULT_SGST_PCT", "default_sgst_pct"))
    DEFAULT_INVOICE_COLOR: str = Field(
        default="white",
        validation_alias=AliasChoices("DEFAULT_INVOICE_COLOR", "default_invoice_color"),
    )

    # Shop details printed on invoices
    SHOP_NAME: str = Field(default="Jewellers", validation_alias=AliasChoices("SHOP_NAME", "shop_name"))
    SHOP_ADDRESS: str = Field(default="", validation_alias=AliasChoices("SHOP_ADDRESS", "shop_address"))
    SHOP_GSTIN: str = Field(default="", validation_alias=AliasChoices("SHOP_GSTIN", "shop_gstin"))

    # Gemini (optional assistant wording)
    GEMINI_API_KEY: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "gemini_api_key"),
    )
    GEMINI_MODEL: str = Field(default="gemini-2.0-flash", validation_alias=AliasChoices("GEMINI_MODEL", "gemini_model"))
    GEMINI_TIMEOUT: float = Field(default=20.0, validation_alias=AliasChoices("GEMINI_TIMEOUT", "gemini_timeout"))


settings = Settings()
