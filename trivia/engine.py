# trivia/engine.py
"""
Motor de la conversación: (documento guardado, texto recibido) → (respuesta, próximo estado).

No hace I/O ni muta el documento; el export del turno final solo se indica en
StepResult.export y lo ejecuta quien llama, ANTES de persistir el reset.
"""
from __future__ import annotations
import logging

from .models import AwaitingAnswer, NotStarted, NOT_STARTED_INDEX, Phase, SessionDoc, StepResult
from .questions import QuestionBank

log = logging.getLogger("trivia.engine")

def phase_of(doc: SessionDoc, bank: QuestionBank) -> Phase:
    idx = doc.last_question_index
    if idx == NOT_STARTED_INDEX and not doc.answers:
        return NotStarted()
    if 0 <= idx < len(bank):
        return AwaitingAnswer(idx)
    # documento inconsistente (respuestas sueltas con -1, o el banco se achicó)
    log.warning("Estado inconsistente para %s (idx=%s, answers=%d); reinicio",
                doc.key, idx, len(doc.answers))
    return NotStarted()

def is_correct(text: str, expected: str) -> bool:
    # contiene, no igualdad: "I think it was 19 years old" vale para "19"
    return expected.lower() in (text or "").lower()

def step(doc: SessionDoc, text: str, bank: QuestionBank) -> StepResult:
    copy = bank.copy
    phase = phase_of(doc, bank)

    # Primer contacto: el texto no es una respuesta
    if isinstance(phase, NotStarted):
        first = bank.get(0)
        return StepResult(
            reply=copy.welcome + "\n\n" + first.prompt,
            answers=[],
            last_question_index=0,
        )

    i = phase.index
    q = bank.get(i)
    ok = is_correct(text, q.expected_answer)
    reply = (copy.correct if ok else copy.incorrect) + " " + q.feedback + "\n\n"

    # siempre desde lo persistido: un reintento del turno final no duplica la última respuesta
    answers = list(doc.answers[:i])
    if len(answers) < i:
        log.warning("Faltan respuestas para %s: %d guardadas, pregunta %d", doc.key, len(answers), i)
    answers.append(text)

    if bank.is_last_index(i):
        return StepResult(
            reply=reply + copy.closing,
            answers=[],
            last_question_index=NOT_STARTED_INDEX,
            export=answers,
            verdict=ok,
        )

    return StepResult(
        reply=reply + bank.get(i + 1).prompt,
        answers=answers,
        last_question_index=i + 1,
        verdict=ok,
    )
