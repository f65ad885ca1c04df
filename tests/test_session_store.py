from gardencart.session_store import MemorySessionStore, SqlSessionStore

USER = {"_id": "u1", "email": "rina@example.com", "name": "Rina"}


def _exercise(store):
    assert store.is_empty()
    store.set_session("tok-1", USER)
    assert store.get_token() == "tok-1"
    assert store.get_user() == USER

    store.update_user({**USER, "name": "Rina A."})
    assert store.get_user()["name"] == "Rina A."
    assert store.get_token() == "tok-1"

    store.clear_session()
    assert store.get_token() is None
    assert store.get_user() is None
    # idempotent
    store.clear_session()
    assert store.is_empty()


def test_memory_store():
    _exercise(MemorySessionStore())


def test_sql_store_in_memory():
    _exercise(SqlSessionStore(url="sqlite://"))


def test_sql_store_survives_reopen(tmp_path):
    url = f"sqlite:///{tmp_path / 'session.db'}"
    SqlSessionStore(url=url).set_session("tok-2", USER)

    reopened = SqlSessionStore(url=url)
    assert reopened.get_token() == "tok-2"
    assert reopened.get_user() == USER
