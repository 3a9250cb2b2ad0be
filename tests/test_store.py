import threading

import pytest

from trivia.errors import StoreConflictError, StoreFetchError, StoreUpdateError
from trivia.store import MemoryStore, SqliteStore, make_store

@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    if request.param == "memory":
        yield MemoryStore()
    else:
        s = SqliteStore(str(tmp_path / "sessions.db"))
        yield s
        s.close()

def test_fetch_or_create_crea_documento_vacio(store):
    d = store.fetch_or_create("+1555")
    assert d.answers == []
    assert d.last_question_index == -1
    assert d.version == 0
    assert store.list_keys() == ["+1555"]

def test_fetch_or_create_no_duplica(store):
    store.fetch_or_create("+1555")
    store.update("+1555", ["19"], 1, expected_version=0)
    d = store.fetch_or_create("+1555")
    assert d.answers == ["19"]
    assert d.last_question_index == 1
    assert store.list_keys() == ["+1555"]

def test_update_reemplaza_ambos_campos(store):
    store.fetch_or_create("k")
    d = store.update("k", ["a", "b"], 2, expected_version=0)
    assert (d.answers, d.last_question_index, d.version) == (["a", "b"], 2, 1)
    d = store.update("k", [], -1, expected_version=1)
    assert (d.answers, d.last_question_index, d.version) == ([], -1, 2)

def test_update_con_version_vieja_es_conflicto(store):
    store.fetch_or_create("k")
    store.update("k", ["a"], 1, expected_version=0)
    with pytest.raises(StoreConflictError):
        store.update("k", ["b"], 1, expected_version=0)
    # no se escribió nada
    d = store.get("k")
    assert d.answers == ["a"]
    assert d.version == 1

def test_reset_vuelve_a_no_empezada(store):
    store.fetch_or_create("k")
    store.update("k", ["a"], 3, expected_version=0, export_claimed_at=123.0)
    assert store.reset("k")
    d = store.get("k")
    assert d.answers == [] and d.last_question_index == -1
    assert d.export_claimed_at == 0
    assert not store.reset("no-existe")

def test_claim_de_export_se_guarda_y_se_limpia(store):
    store.fetch_or_create("k")
    d = store.update("k", ["19", "29", "Memphis"], 3, expected_version=0, export_claimed_at=1000.5)
    assert d.export_claimed_at == 1000.5
    assert store.get("k").export_claimed_at == 1000.5
    # un update sin claim lo limpia
    d = store.update("k", [], -1, expected_version=1)
    assert d.export_claimed_at == 0

def test_update_sin_sesion_en_memoria():
    with pytest.raises(StoreUpdateError):
        MemoryStore().update("nadie", [], 0, expected_version=0)

def test_primer_contacto_concurrente_un_solo_documento(store):
    results = []
    barrier = threading.Barrier(8)

    def first_contact():
        barrier.wait()
        results.append(store.fetch_or_create("+1999"))

    threads = [threading.Thread(target=first_contact) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.list_keys() == ["+1999"]
    assert {r.version for r in results} == {0}

def test_sqlite_persiste_entre_conexiones(tmp_path):
    path = str(tmp_path / "s.db")
    s1 = SqliteStore(path)
    s1.fetch_or_create("k")
    s1.update("k", ["Memphis"], 3, expected_version=0)
    s1.close()
    s2 = SqliteStore(path)
    d = s2.fetch_or_create("k")
    assert d.answers == ["Memphis"]
    assert d.last_question_index == 3
    s2.close()

def test_make_store():
    assert isinstance(make_store("memory", ""), MemoryStore)
    with pytest.raises(ValueError):
        make_store("redis", "")

def test_sqlite_answers_corrupto_es_error_de_store(tmp_path):
    s = SqliteStore(str(tmp_path / "s.db"))
    s.fetch_or_create("k")
    s.conn.execute("UPDATE sessions SET answers='{roto' WHERE key='k'")
    with pytest.raises(StoreFetchError):
        s.fetch_or_create("k")
    with pytest.raises(StoreFetchError):
        s.get("k")
    s.close()

def test_sqlite_migra_base_sin_columna_de_claim(tmp_path):
    import sqlite3
    path = str(tmp_path / "vieja.db")
    con = sqlite3.connect(path)
    con.execute("CREATE TABLE sessions(key TEXT PRIMARY KEY, answers TEXT NOT NULL DEFAULT '[]', "
                "last_question_index INTEGER NOT NULL DEFAULT -1, version INTEGER NOT NULL DEFAULT 0)")
    con.execute("INSERT INTO sessions VALUES('k', '[\"19\"]', 1, 4)")
    con.commit()
    con.close()
    s = SqliteStore(path)
    d = s.fetch_or_create("k")
    assert (d.answers, d.last_question_index, d.version, d.export_claimed_at) == (["19"], 1, 4, 0)
    s.close()
