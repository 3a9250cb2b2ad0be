# trivia/models.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, AliasChoices

NOT_STARTED_INDEX = -1

# ========================
# Documento persistido (una por participante)
# ========================
class SessionDoc(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    key: str
    answers: List[str] = Field(default_factory=list)
    last_question_index: int = Field(
        default=NOT_STARTED_INDEX,
        validation_alias=AliasChoices("last_question_index", "lastQuestionIndex", "lastQuestionAsked"),
    )
    # token para compare-and-set; +1 en cada update exitoso
    version: int = 0
    # epoch del turno final que tomó el export (0 = nadie)
    export_claimed_at: float = 0.0

# ========================
# Fases explícitas de la conversación
# ========================
@dataclass(frozen=True)
class NotStarted:
    name = "not_started"

@dataclass(frozen=True)
class AwaitingAnswer:
    index: int
    name = "awaiting_answer"

Phase = Union[NotStarted, AwaitingAnswer]

@dataclass(frozen=True)
class StepResult:
    """Salida de un paso del motor: respuesta + próximo estado (+ export pendiente)."""
    reply: str
    answers: List[str]
    last_question_index: int
    export: Optional[List[str]] = None
    verdict: Optional[bool] = None

    @property
    def is_terminal(self) -> bool:
        return self.export is not None

# ========================
# I/O HTTP
# ========================
class ChatIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    session: str = Field(validation_alias=AliasChoices("session", "session_id", "From"))
    text: str = Field(default="", validation_alias=AliasChoices("text", "message", "Body"))

class ChatOut(BaseModel):
    reply: str
    trace: Dict[str, Any] = {}
