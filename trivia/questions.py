# trivia/questions.py
from __future__ import annotations
import json
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, AliasChoices, ValidationError

from .errors import QuestionBankError

class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")
    prompt: str = Field(validation_alias=AliasChoices("prompt", "question"))
    expected_answer: str = Field(validation_alias=AliasChoices("expected_answer", "expectedAnswer", "answer"))
    feedback: str = Field(validation_alias=AliasChoices("feedback", "answerResponse"))

class QuizCopy(BaseModel):
    """Textos fijos que ve el participante."""
    model_config = ConfigDict(frozen=True, extra="ignore")
    welcome: str = "Thanks for playing Minds on King Trivia! Let's get started."
    correct: str = "You got it."
    incorrect: str = "Hmm, not quite."
    closing: str = "Thank you for playing!"
    general_error: str = "We're sorry, the quiz is not currently available. Please try again later."

DEFAULT_QUESTIONS: List[Question] = [
    Question(
        prompt="How old was Martin Luther King Jr. when he graduated from Morehouse College with a degree in Sociology?",
        expected_answer="19",
        feedback="After skipping 9th and 12th grades and entering college at 15, MLK was 19 when he earned his first degree. He would earn another BA and a Ph.D. by 1955.",
    ),
    Question(
        prompt="How many times was MLK sent to jail?",
        expected_answer="29",
        feedback="During MLK's career as an activist he was jailed 29 times, often for trumped-up offenses and civil disobedience.",
    ),
    Question(
        prompt='MLK once said "I may not get there with you. But I want you to know tonight, that we, as a people, will get to the Promised Land." In what U.S. city were these words said, shortly before he was assassinated on April 4, 1968?',
        expected_answer="Memphis",
        feedback="Dr. King said these words and was later assassinated in Memphis, Tennessee while supporting a workers' strike.",
    ),
    Question(
        prompt="And finally, for a nerdy one - which iconic sci-fi character did MLK play a role in preserving?",
        expected_answer="Uhura",
        feedback='MLK convinced Nichelle Nichols to continue playing Lieutenant Uhura on "Star Trek" after the first season because she was playing a major character who did not conform to stereotypes of the day. Black actors (like Whoopi Goldberg) and space explorers (like Ronald McNair) cited Uhura as an inspiration for their work.',
    ),
]

class QuestionBank:
    """Secuencia ordenada e inmutable de preguntas. Fuera de rango → None."""

    def __init__(self, questions: Sequence[Question], copy: Optional[QuizCopy] = None):
        if not questions:
            raise QuestionBankError("El banco de preguntas está vacío")
        self._questions = tuple(questions)
        self.copy = copy or QuizCopy()

    def get(self, index: int) -> Optional[Question]:
        if 0 <= index < len(self._questions):
            return self._questions[index]
        return None

    def length(self) -> int:
        return len(self._questions)

    def __len__(self) -> int:
        return len(self._questions)

    def is_last_index(self, i: int) -> bool:
        return i == len(self._questions) - 1

def default_bank() -> QuestionBank:
    return QuestionBank(DEFAULT_QUESTIONS)

def load_bank(path: str) -> QuestionBank:
    """
    Lee un JSON con:
      - una lista de preguntas, o
      - {"copy": {...}, "questions": [...]}
    Acepta las claves del toolkit original (question / answer / answerResponse).
    """
    p = Path(path)
    if not p.exists():
        raise QuestionBankError(f"Archivo de preguntas no encontrado: {path}")
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise QuestionBankError(f"JSON inválido en {path}: {e}") from e

    if isinstance(raw, list):
        raw = {"questions": raw}
    if not isinstance(raw, dict):
        raise QuestionBankError(f"Formato no soportado en {path}")

    try:
        questions = [Question.model_validate(q) for q in raw.get("questions") or []]
        copy = QuizCopy.model_validate(raw.get("copy") or {})
    except ValidationError as e:
        raise QuestionBankError(f"Pregunta inválida en {path}: {e}") from e
    return QuestionBank(questions, copy)

def bank_from_settings(questions_path: str = "") -> QuestionBank:
    return load_bank(questions_path) if questions_path else default_bank()
