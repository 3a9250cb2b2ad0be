# trivia/errors.py
"""Errores del quiz. Todos abortan el turno; el participante solo ve el mensaje genérico."""


class QuizError(Exception):
    pass


class QuestionBankError(QuizError):
    """Banco de preguntas inválido (config)."""


class StoreError(QuizError):
    pass


class StoreFetchError(StoreError):
    pass


class StoreUpdateError(StoreError):
    pass


class StoreConflictError(StoreError):
    """La versión guardada cambió entre el fetch y el update."""

    def __init__(self, key: str, expected_version: int):
        super().__init__(f"conflicto de versión para {key!r} (esperada {expected_version})")
        self.key = key
        self.expected_version = expected_version


class ExportError(QuizError):
    pass


class ExportInProgressError(QuizError):
    """Otro turno ya tomó el export de esta sesión y todavía no terminó."""
