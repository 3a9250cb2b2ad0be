# trivia/export.py
"""
Export de una sesión terminada (ej: Zap de Zapier que agrega una fila en Google Sheets).
Body tipo form: PhoneNumber=<key>, 1=<respuesta 1>, 2=<respuesta 2>, ...
"""
import json, logging
from typing import Dict, List, Sequence

import requests

from .errors import ExportError

log = logging.getLogger("trivia.export")

def build_export_payload(key: str, answers: Sequence[str]) -> Dict[str, str]:
    body = {"PhoneNumber": key}
    for i, a in enumerate(answers, start=1):
        body[str(i)] = a
    return body

class WebhookExporter:
    def __init__(self, url: str, timeout: float = 20.0, session: requests.Session = None) -> None:
        if not url:
            raise ValueError("WebhookExporter necesita una URL")
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit(self, key: str, answers: List[str]) -> None:
        payload = build_export_payload(key, answers)
        try:
            r = self.session.post(self.url, data=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExportError(f"Export falló para {key}: {e}") from e
        if not 200 <= r.status_code < 300:
            raise ExportError(f"Export rechazado para {key}: HTTP {r.status_code} {r.text[:200]}")
        log.info("Export OK: %s (%d respuestas)", key, len(answers))

class LogExporter:
    """Sin EXPORT_URL: solo deja el payload en el log."""

    def submit(self, key: str, answers: List[str]) -> None:
        log.warning("EXPORT_URL no configurado; export solo a log: %s",
                    json.dumps(build_export_payload(key, answers), ensure_ascii=False))

def make_exporter(url: str, timeout: float = 20.0):
    return WebhookExporter(url, timeout=timeout) if url else LogExporter()
