"""Tests for concurrent puts and reads."""

import io
import threading

from castore import DepthMapper, Store
from castore.hashing import compute_key

FOOBAR_KEY = "c3ab8ff13720e8ad9047dd39466b3c8974e592c2fa383d4a3960714caef0c4f2"


def run_threads(target, count):
    errors = []

    def wrapper(i):
        try:
            target(i)
        except Exception as e:  # collected and asserted on below
            errors.append(e)

    threads = [threading.Thread(target=wrapper, args=(i,)) for i in range(count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


class TestConcurrentPuts:
    """Concurrent writers only meet at the atomic rename."""

    def test_identical_content_races_harmlessly(self, store, stored_files, staged_files):
        keys = []

        errors = run_threads(lambda i: keys.append(store.put_string("foobar")), 16)

        assert errors == []
        assert set(keys) == {FOOBAR_KEY}
        assert stored_files(store) == [store.root / FOOBAR_KEY]
        assert staged_files(store) == []
        with store.get(FOOBAR_KEY) as f:
            assert f.read() == b"foobar"

    def test_distinct_content(self, tmp_path, stored_files, staged_files):
        store = Store(base_path=tmp_path, path_mapper=DepthMapper(1))
        keys = {}

        def put(i):
            keys[i] = store.put_bytes(f"object {i}".encode() * 1000)

        errors = run_threads(put, 20)

        assert errors == []
        assert len(set(keys.values())) == 20
        assert len(stored_files(store)) == 20
        assert staged_files(store) == []
        for i, key in keys.items():
            with store.get(key) as f:
                assert f.read() == f"object {i}".encode() * 1000

    def test_reader_never_sees_partial_object(self, store):
        data = b"x" * (2 * 1024 * 1024)
        key_holder = {}
        observed = []
        done = threading.Event()

        def writer():
            key_holder["key"] = store.put_bytes(data)
            done.set()

        def reader():
            key = compute_key(io.BytesIO(data))
            while not done.is_set():
                f = store.get(key)
                if f is not None:
                    with f:
                        observed.append(len(f.read()))
            key_holder["expected"] = key

        t_reader = threading.Thread(target=reader)
        t_writer = threading.Thread(target=writer)
        t_reader.start()
        t_writer.start()
        t_writer.join()
        t_reader.join()

        assert key_holder["key"] == key_holder["expected"]
        assert all(n == len(data) for n in observed)

    def test_two_stores_same_root(self, tmp_path):
        a = Store(base_path=tmp_path)
        b = Store(base_path=tmp_path)

        key = a.put_string("foobar")
        assert b.size(key) == 6
        assert b.put_string("foobar") == key
