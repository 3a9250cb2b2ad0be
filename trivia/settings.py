# trivia/settings.py
from pydantic import BaseModel
import os
from dotenv import load_dotenv

load_dotenv(override=False)

class Settings(BaseModel):
    # Estado por participante
    store_backend: str = os.getenv("STORE_BACKEND", "sqlite")  # "sqlite" | "memory"
    store_path: str = os.getenv("STORE_PATH", "./data/quiz_sessions.db")
    max_conflict_retries: int = int(os.getenv("MAX_CONFLICT_RETRIES", "3"))

    # Export (webhook tipo Zapier → Google Sheet). Vacío = solo log
    export_url: str = os.getenv("EXPORT_URL") or os.getenv("TTK_QUIZ_ZAP_URL") or ""
    export_timeout: float = float(os.getenv("EXPORT_TIMEOUT", "20"))
    # cuánto dura el claim del turno final antes de poder retomarse (seg)
    export_claim_ttl: float = float(os.getenv("EXPORT_CLAIM_TTL", "60"))

    # Preguntas
    quiz_questions_path: str = os.getenv("QUIZ_QUESTIONS_PATH", "")

    # Identidad: si está seteado, se antepone a ids sin '+' (ej: "1" → +1...)
    default_country_code: str = os.getenv("DEFAULT_COUNTRY_CODE", "")
    # "whatsapp:+1..." → "+1..." solo si se pide; por defecto el id va tal cual
    strip_channel_prefix: bool = os.getenv("STRIP_CHANNEL_PREFIX", "false").lower() == "true"

    # Logs
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_dir: str = os.getenv("LOG_DIR", "")

    port: int = int(os.getenv("PORT", "8000"))

settings = Settings()
