import threading

from backend.sommelier.file_lock import lock_path_for
from backend.sommelier.persistence import JsonFilePersistence, MemoryPersistence


def test_missing_file_loads_as_none(tmp_path):
    assert JsonFilePersistence(tmp_path / "absent.json").load() is None


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "store.json"
    persistence = JsonFilePersistence(path)

    persistence.save('{"a": 1}')

    assert persistence.load() == '{"a": 1}'
    assert not path.with_name("store.json.tmp").exists()


def test_lock_is_reentrant(tmp_path):
    persistence = JsonFilePersistence(tmp_path / "store.json", lock_timeout=0.5)
    with persistence.lock():
        with persistence.lock():
            persistence.save("inner")
        assert lock_path_for(persistence.path).exists()
    assert persistence.load() == "inner"


def test_lock_serialises_independent_handles(tmp_path):
    path = tmp_path / "counter.json"
    JsonFilePersistence(path).save("0")
    errors = []

    def increment() -> None:
        persistence = JsonFilePersistence(path, lock_timeout=5.0)
        try:
            for _ in range(10):
                with persistence.lock():
                    value = int(persistence.load() or "0")
                    persistence.save(str(value + 1))
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=increment) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=20)

    assert errors == []
    assert JsonFilePersistence(path).load() == "40"


def test_memory_persistence_counts_saves():
    persistence = MemoryPersistence("seed")
    assert persistence.load() == "seed"
    with persistence.lock():
        with persistence.lock():
            persistence.save("next")
    assert persistence.load() == "next"
    assert persistence.saves == 1
