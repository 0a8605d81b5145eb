from pydantic_settings import BaseSettings, SettingsConfigDict

_SUPPORTED_PROVIDERS = ("anthropic", "openai", "openrouter")

_DEFAULT_MODELS = {
    "anthropic": "claude-3-haiku-20240307",
    "openai": "gpt-3.5-turbo",
    "openrouter": "anthropic/claude-3-haiku",
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://status:status@db:5432/status"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    # Single secret in the form "provider:api_key".
    LLM_CREDENTIALS: str = ""
    LLM_MODEL: str = ""
    LLM_MAX_TOKENS: int = 1000
    LLM_TEMPERATURE: float = 0.1
    LLM_TIMEOUT_SECONDS: float = 30.0

    RELEVANCE_THRESHOLD: float = 0.3
    HISTORY_LIMIT: int = 20
    # Compare-and-swap on the latest pointer instead of last-write-wins.
    STRICT_ORDERING: bool = False

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    def _credentials(self) -> tuple[str, str]:
        if ":" not in self.LLM_CREDENTIALS:
            return "anthropic", ""
        provider, api_key = self.LLM_CREDENTIALS.split(":", 1)
        provider = provider.strip().lower()
        api_key = api_key.strip()
        if provider not in _SUPPORTED_PROVIDERS or not api_key:
            return "anthropic", ""
        return provider, api_key

    @property
    def llm_provider(self) -> str:
        return self._credentials()[0]

    @property
    def llm_api_key(self) -> str:
        return self._credentials()[1]

    @property
    def llm_model(self) -> str:
        return self.LLM_MODEL or _DEFAULT_MODELS[self.llm_provider]


settings = Settings()
