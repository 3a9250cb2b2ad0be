import json

import pytest

from trivia.errors import QuestionBankError
from trivia.questions import QuestionBank, bank_from_settings, default_bank, load_bank

def test_banco_por_defecto():
    bank = default_bank()
    assert bank.length() == 4
    assert bank.get(0).expected_answer == "19"
    assert bank.is_last_index(3)
    assert not bank.is_last_index(2)

def test_fuera_de_rango_es_none():
    bank = default_bank()
    assert bank.get(4) is None
    assert bank.get(-1) is None

def test_banco_vacio_es_error():
    with pytest.raises(QuestionBankError):
        QuestionBank([])

def test_carga_json_con_claves_del_toolkit(tmp_path):
    p = tmp_path / "q.json"
    p.write_text(json.dumps([
        {"question": "Capital of Peru?", "answer": "Lima", "answerResponse": "Since 1535."},
        {"prompt": "Legs on a spider?", "expected_answer": "8", "feedback": "Eight."},
    ]), encoding="utf-8")
    bank = load_bank(str(p))
    assert len(bank) == 2
    assert bank.get(0).prompt == "Capital of Peru?"
    assert bank.get(1).feedback == "Eight."
    assert bank.copy.welcome == default_bank().copy.welcome

def test_carga_json_con_textos(tmp_path):
    p = tmp_path / "q.json"
    p.write_text(json.dumps({
        "copy": {"welcome": "Hola!", "closing": "Chau!"},
        "questions": [{"prompt": "1+1?", "expected_answer": "2", "feedback": "Two."}],
    }), encoding="utf-8")
    bank = bank_from_settings(str(p))
    assert bank.copy.welcome == "Hola!"
    assert bank.copy.correct == "You got it."

def test_json_invalido(tmp_path):
    p = tmp_path / "q.json"
    p.write_text("{no es json", encoding="utf-8")
    with pytest.raises(QuestionBankError):
        load_bank(str(p))
    with pytest.raises(QuestionBankError):
        load_bank(str(tmp_path / "no_existe.json"))

def test_pregunta_incompleta(tmp_path):
    p = tmp_path / "q.json"
    p.write_text(json.dumps([{"prompt": "sin respuesta"}]), encoding="utf-8")
    with pytest.raises(QuestionBankError):
        load_bank(str(p))
