# trivia/sms_bridge_handler.py
from __future__ import annotations
import re, threading, time
from typing import Callable, List, Optional

from .debug import get_logger, trace
from .engine import phase_of, step
from .errors import ExportError, ExportInProgressError, QuizError, StoreConflictError, StoreError
from .export import make_exporter
from .models import AwaitingAnswer, NotStarted, SessionDoc
from .questions import QuestionBank, QuizCopy, bank_from_settings
from .settings import settings
from .store import make_store

log = get_logger("handler")

_CHANNEL_RE = re.compile(r"^(whatsapp|sms|tel):", re.I)

def normalize_sender(raw: str, default_country_code: str = "", strip_channel_prefix: bool = False) -> str:
    """
    Id del remitente → clave del store. Por defecto va tal cual (sin espacios).
    Opcional: quitar prefijos de canal ("whatsapp:") y anteponer un código de país
    a números sin '+' (caso típico: números de EE.UU. sin +1).
    """
    s = (raw or "").strip()
    if strip_channel_prefix:
        s = _CHANNEL_RE.sub("", s)
    if default_country_code and s and not s.startswith("+") and s[0].isdigit():
        cc = default_country_code.lstrip("+")
        s = f"+{cc}{s}"
    return s

class QuizService:
    """Un turno = fetch_or_create → step → (claim + export) → update condicional."""

    def __init__(self, store, exporter, bank: QuestionBank, max_conflict_retries: int = 3,
                 default_country_code: str = "", strip_channel_prefix: bool = False,
                 export_claim_ttl: float = 60.0, clock: Callable[[], float] = time.time):
        self.store = store
        self.exporter = exporter
        self.bank = bank
        self.max_conflict_retries = max_conflict_retries
        self.default_country_code = default_country_code
        self.strip_channel_prefix = strip_channel_prefix
        self.export_claim_ttl = export_claim_ttl
        self.clock = clock

    def _awaits_last(self, doc: SessionDoc) -> bool:
        phase = phase_of(doc, self.bank)
        return isinstance(phase, AwaitingAnswer) and self.bank.is_last_index(phase.index)

    def _export_once(self, doc: SessionDoc, answers: List[str]) -> SessionDoc:
        """
        Toma el turno final con un update condicional ANTES de exportar:
        un turno concurrente sobre la misma versión conflictúa sin exportar.
        Si el export falla, libera el claim y el documento vuelve a quedar listo para reintentar.
        """
        now = self.clock()
        if doc.export_claimed_at and now - doc.export_claimed_at < self.export_claim_ttl:
            raise ExportInProgressError(f"Export en curso para {doc.key}")

        claimed = self.store.update(doc.key, doc.answers, doc.last_question_index,
                                    expected_version=doc.version, export_claimed_at=now)
        try:
            self.exporter.submit(doc.key, answers)
        except ExportError:
            try:
                self.store.update(doc.key, doc.answers, doc.last_question_index,
                                  expected_version=claimed.version)
            except StoreError as e:
                # queda tomado hasta que venza export_claim_ttl
                log.warning("No se pudo liberar el claim de %s: %s", doc.key, e)
            raise
        trace("export", doc.key, answers=len(answers))
        return claimed

    def _turn(self, doc: SessionDoc, text: str, stale: Optional[SessionDoc]) -> str:
        key = doc.key
        phase = phase_of(doc, self.bank)

        # este mensaje respondía la última pregunta y otro turno ya cerró el quiz
        if stale is not None and isinstance(phase, NotStarted) and self._awaits_last(stale):
            trace("already_completed", key, version=doc.version)
            return self.bank.copy.closing

        result = step(doc, text, self.bank)
        trace("turn", key, phase=phase.name, index=doc.last_question_index,
              verdict=result.verdict, next_index=result.last_question_index)

        expected = doc.version
        if result.is_terminal:
            # export primero: si falla, el documento queda como estaba
            expected = self._export_once(doc, result.export).version

        self.store.update(key, result.answers, result.last_question_index, expected_version=expected)
        return result.reply

    def handle(self, sender: str, text: Optional[str]) -> str:
        key = normalize_sender(sender, self.default_country_code, self.strip_channel_prefix)
        text = text or ""
        try:
            if not key:
                raise QuizError("Mensaje sin remitente")
            attempts = 0
            stale = None
            while True:
                doc = self.store.fetch_or_create(key)
                try:
                    return self._turn(doc, text, stale)
                except StoreConflictError:
                    attempts += 1
                    trace("store_conflict", key, attempt=attempts)
                    if attempts > self.max_conflict_retries:
                        raise
                    stale = stale or doc
        except QuizError as e:
            log.exception("Turno fallido para %s: %s", key, e)
            trace("turn_failed", key, error=type(e).__name__)
            return self.bank.copy.general_error

# ========================
# Instancia por defecto (lazy, desde settings)
# ========================
_service: Optional[QuizService] = None
_service_lock = threading.Lock()

def get_service() -> QuizService:
    global _service
    with _service_lock:
        if _service is None:
            _service = QuizService(
                store=make_store(settings.store_backend, settings.store_path),
                exporter=make_exporter(settings.export_url, settings.export_timeout),
                bank=bank_from_settings(settings.quiz_questions_path),
                max_conflict_retries=settings.max_conflict_retries,
                default_country_code=settings.default_country_code,
                strip_channel_prefix=settings.strip_channel_prefix,
                export_claim_ttl=settings.export_claim_ttl,
            )
            log.info("QuizService listo (store=%s, preguntas=%d)", settings.store_backend, len(_service.bank))
        return _service

def set_service(service: Optional[QuizService]):
    """Para tests: inyectar (o limpiar) la instancia por defecto."""
    global _service
    with _service_lock:
        _service = service

def general_error() -> str:
    """Texto de falla del banco cargado (o el default si el servicio no llegó a armarse)."""
    svc = _service
    return svc.bank.copy.general_error if svc is not None else QuizCopy().general_error

def handle_message(user_id: str, text: str) -> str:
    return get_service().handle(user_id, text)
