# -*- coding: utf-8 -*-
# scripts/inspect_sessions.py
import argparse, logging, os

from trivia.engine import phase_of
from trivia.questions import bank_from_settings
from trivia.store import SqliteStore

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Listar / resetear sesiones del quiz")
    ap.add_argument("--db", default=os.getenv("STORE_PATH", "./data/quiz_sessions.db"))
    ap.add_argument("--questions", default=os.getenv("QUIZ_QUESTIONS_PATH", ""))
    ap.add_argument("--reset", metavar="KEY", help="vuelve la sesión KEY a 'no empezada'")
    a = ap.parse_args()

    store = SqliteStore(a.db)
    bank = bank_from_settings(a.questions)

    if a.reset:
        done = store.reset(a.reset)
        print(f"Reset {a.reset}: {'OK' if done else 'no existe'}")
    else:
        print("== Sesiones ==")
        for key in store.list_keys():
            doc = store.get(key)
            phase = phase_of(doc, bank)
            idx = getattr(phase, "index", "-")
            print(f"- {key}  fase={phase.name} pregunta={idx} respuestas={len(doc.answers)} v{doc.version}")
    store.close()
