from app.services.local_storage import LocalStorage


def test_set_get_persists_to_disk(tmp_path):
    path = tmp_path / "store.json"
    LocalStorage(path=path).set_item("user", '{"id": "1"}')

    assert path.exists()
    assert LocalStorage(path=path).get_item("user") == '{"id": "1"}'


def test_missing_file_is_empty(tmp_path):
    assert LocalStorage(path=tmp_path / "nope.json").get_item("user") is None


def test_corrupt_file_is_ignored(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{not json")

    store = LocalStorage(path=path)

    assert store.get_item("user") is None
    store.set_item("user", "x")
    assert LocalStorage(path=path).get_item("user") == "x"


def test_remove_last_item_deletes_file(tmp_path):
    path = tmp_path / "store.json"
    store = LocalStorage(path=path)
    store.set_item("a", "1")
    store.set_item("b", "2")

    store.remove_item("a")
    assert path.exists()
    store.remove_item("b")
    assert not path.exists()


def test_clear(tmp_path):
    path = tmp_path / "store.json"
    store = LocalStorage(path=path)
    store.set_item("a", "1")

    store.clear()

    assert store.get_item("a") is None
    assert not path.exists()
