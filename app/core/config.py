import os

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    APP_ENV: str = os.getenv("APP_ENV", "local")
    APP_NAME: str = os.getenv("APP_NAME", "alvo-propostas")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ALLOW_ORIGINS: list[str] = [
        o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
    ]
    USAGE_LOGGING: bool = _env_bool("USAGE_LOGGING", "true")

    # Letterhead used by the proposal document when the caller leaves it blank
    COMPANY_NAME: str = os.getenv("COMPANY_NAME", "Alvo BR Imobiliária")
    COMPANY_SITE: str = os.getenv("COMPANY_SITE", "https://alvobr.com.br")
    COMPANY_EMAIL: str = os.getenv("COMPANY_EMAIL", "contato@alvobr.com.br")
    COMPANY_PHONE: str = os.getenv("COMPANY_PHONE", "(47) 9 9999-9999")
    PROPOSAL_VALIDITY_DAYS: int = int(os.getenv("PROPOSAL_VALIDITY_DAYS", "7"))

    IRR_GUESS: float = float(os.getenv("IRR_GUESS", "0.10"))
    IRR_MAX_ITERATIONS: int = int(os.getenv("IRR_MAX_ITERATIONS", "1000"))
    IRR_TOLERANCE: float = float(os.getenv("IRR_TOLERANCE", "0.0001"))


settings = Settings()
