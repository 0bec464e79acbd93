import itertools
import threading
import time

import pytest

from taskflow.models import Task, TaskFilter, TaskStats
from taskflow.snapshot import decode_snapshot
from taskflow.storage import InMemorySnapshotStorage
import taskflow.store as store_module
from taskflow.store import TaskListStore, get_store

KEY = "todos-v2"


def make_store(storage=None):
    counter = itertools.count(1)
    store = TaskListStore(
        storage if storage is not None else InMemorySnapshotStorage(),
        key=KEY,
        id_factory=lambda: f"t{next(counter)}",
        clock=lambda: 1_700_000_000_000,
    )
    store.load()
    return store


class CountingStorage(InMemorySnapshotStorage):
    def __init__(self, items=None):
        super().__init__(items)
        self.writes = 0

    def set_item(self, key, value):
        self.writes += 1
        super().set_item(key, value)


class TestAdd:
    def test_add_prepends_trimmed_open_task(self):
        store = make_store()
        task = store.add("  Buy milk  ")
        assert task == Task(id="t1", text="Buy milk", done=False, created_at=1_700_000_000_000)
        assert store.tasks == [task]

    def test_add_count_matches_non_blank_calls(self):
        store = make_store()
        texts = ["a", "", "b", "   ", "c", "\t\n"]
        for text in texts:
            store.add(text)
        assert len(store.tasks) == 3
        assert [t.text for t in store.tasks] == ["c", "b", "a"]

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_add_is_noop_without_persisting(self, text):
        storage = CountingStorage()
        store = make_store(storage)
        assert store.add(text) is None
        assert store.tasks == []
        assert storage.writes == 0
        assert storage.get_item(KEY) is None

    def test_ids_are_unique_with_default_factory(self):
        store = TaskListStore(InMemorySnapshotStorage())
        for i in range(50):
            store.add(f"task {i}")
        assert len({t.id for t in store.tasks}) == 50


class TestMutations:
    def test_toggle_twice_restores_done(self):
        store = make_store()
        task = store.add("Walk dog")
        store.toggle(task.id)
        assert store.tasks[0].done is True
        store.toggle(task.id)
        assert store.tasks[0].done is False

    def test_toggle_keeps_id_and_position(self):
        store = make_store()
        store.add("a")
        middle = store.add("b")
        store.add("c")
        store.toggle(middle.id)
        assert [t.id for t in store.tasks] == ["t3", "t2", "t1"]
        assert [t.done for t in store.tasks] == [False, True, False]

    def test_toggle_unknown_id_is_noop_but_persists(self):
        storage = CountingStorage()
        store = make_store(storage)
        store.add("a")
        before = store.tasks
        store.toggle("missing")
        assert store.tasks == before
        assert storage.writes == 2

    def test_delete_removes_only_matching_task(self):
        store = make_store()
        first = store.add("a")
        second = store.add("b")
        store.delete(first.id)
        assert store.tasks == [second]
        store.delete("missing")
        assert store.tasks == [second]

    def test_clear_completed_is_idempotent_and_always_persists(self):
        storage = CountingStorage()
        store = make_store(storage)
        a = store.add("a")
        store.add("b")
        c = store.add("c")
        store.toggle(a.id)
        store.toggle(c.id)
        writes = storage.writes

        store.clear_completed()
        once = store.tasks
        store.clear_completed()
        assert store.tasks == once
        assert [t.text for t in once] == ["b"]
        assert storage.writes == writes + 2

    def test_complete_all_then_stats(self):
        store = make_store()
        store.add("a")
        first = store.add("b")
        store.toggle(first.id)
        store.complete_all()
        stats = store.stats()
        assert stats.remaining == 0
        assert stats.progress == 100
        assert all(t.done for t in store.tasks)

    def test_complete_all_on_empty_collection(self):
        storage = CountingStorage()
        store = make_store(storage)
        store.complete_all()
        assert store.stats() == TaskStats(total=0, completed=0, remaining=0, progress=0)
        assert storage.writes == 1


class TestReads:
    def test_stats_empty(self):
        store = make_store()
        assert store.stats().model_dump() == {"total": 0, "completed": 0, "remaining": 0, "progress": 0}

    @pytest.mark.parametrize(
        "done_count,total,expected",
        [(1, 3, 33), (2, 3, 67), (1, 8, 13), (3, 8, 38), (5, 8, 63)],
    )
    def test_progress_rounds_half_up(self, done_count, total, expected):
        store = make_store()
        tasks = [store.add(f"task {i}") for i in range(total)]
        for task in tasks[:done_count]:
            store.toggle(task.id)
        assert store.stats().progress == expected

    def test_visible_preserves_order(self):
        store = make_store()
        a = store.add("a")
        b = store.add("b")
        c = store.add("c")
        store.toggle(b.id)
        assert store.visible(TaskFilter.ALL) == store.tasks
        assert [t.id for t in store.visible("active")] == [c.id, a.id]
        assert [t.id for t in store.visible("completed")] == [b.id]

    def test_visible_rejects_unknown_filter(self):
        store = make_store()
        with pytest.raises(ValueError):
            store.visible("archived")

    def test_tasks_property_is_a_copy(self):
        store = make_store()
        store.add("a")
        store.tasks.clear()
        assert len(store.tasks) == 1

    def test_scenario(self):
        store = make_store()
        milk = store.add("Buy milk")
        store.add("Walk dog")
        assert [t.text for t in store.tasks] == ["Walk dog", "Buy milk"]

        store.toggle(milk.id)
        assert [t.text for t in store.visible("active")] == ["Walk dog"]
        assert [t.text for t in store.visible("completed")] == ["Buy milk"]
        assert store.stats() == TaskStats(total=2, completed=1, remaining=1, progress=50)


class TestLoadAndPersist:
    def test_load_missing_snapshot_is_empty(self):
        assert make_store().tasks == []

    def test_reload_reproduces_collection(self):
        storage = InMemorySnapshotStorage()
        store = make_store(storage)
        store.add("a")
        b = store.add("b")
        store.add("c")
        store.toggle(b.id)

        reloaded = TaskListStore(storage, key=KEY)
        loaded = reloaded.load()
        assert loaded == store.tasks
        assert [(t.id, t.text, t.done) for t in reloaded.tasks] == [
            ("t3", "c", False),
            ("t2", "b", True),
            ("t1", "a", False),
        ]

    def test_persist_writes_compact_camel_case_snapshot(self):
        storage = InMemorySnapshotStorage()
        store = make_store(storage)
        store.add("Buy milk")
        assert storage.get_item(KEY) == (
            '[{"id":"t1","text":"Buy milk","done":false,"createdAt":1700000000000}]'
        )

    @pytest.mark.parametrize(
        "raw",
        [
            "{not json",
            "null",
            '{"id": "1", "text": "a", "done": false}',
            '[{"id": "1", "text": "a"}]',
            '[{"id": "1", "text": "   ", "done": false}]',
            '[{"id": 1, "text": "a", "done": false}]',
            '[{"id": "1", "text": "a", "done": false}, {"id": "1", "text": "b", "done": true}]',
        ],
    )
    def test_malformed_snapshot_loads_empty(self, raw):
        storage = InMemorySnapshotStorage({KEY: raw})
        store = TaskListStore(storage, key=KEY)
        assert store.load() == []
        assert store.tasks == []
        # the bad value is only replaced by the next command
        assert storage.get_item(KEY) == raw
        store.add("fresh start")
        assert len(decode_snapshot(storage.get_item(KEY))) == 1

    def test_empty_string_snapshot_counts_as_absent(self):
        store = TaskListStore(InMemorySnapshotStorage({KEY: ""}), key=KEY)
        assert store.load() == []

    def test_legacy_snapshot_without_created_at(self):
        raw = '[{"id": "a1", "text": "Old task", "done": true}, {"id": "a2", "text": "Other", "done": false}]'
        storage = InMemorySnapshotStorage({KEY: raw})
        store = TaskListStore(storage, key=KEY)
        loaded = store.load()
        assert [(t.id, t.text, t.done, t.created_at) for t in loaded] == [
            ("a1", "Old task", True, None),
            ("a2", "Other", False, None),
        ]
        store.persist()
        assert storage.get_item(KEY) == (
            '[{"id":"a1","text":"Old task","done":true},{"id":"a2","text":"Other","done":false}]'
        )

    def test_load_replaces_in_memory_state(self):
        storage = InMemorySnapshotStorage()
        store = make_store(storage)
        store.add("a")
        storage.set_item(KEY, "[]")
        assert store.load() == []
        assert store.tasks == []

    def test_store_uses_its_own_key(self):
        storage = InMemorySnapshotStorage({"todos": '[{"id": "x", "text": "other", "done": false}]'})
        store = TaskListStore(storage, key=KEY)
        assert store.load() == []
        store.add("mine")
        assert decode_snapshot(storage.get_item("todos"))[0].text == "other"


class SlowReadStorage(InMemorySnapshotStorage):
    def __init__(self, items=None, delay=0.2):
        super().__init__(items)
        self.delay = delay
        self.reading = threading.Event()

    def get_item(self, key):
        self.reading.set()
        time.sleep(self.delay)
        return super().get_item(key)


class TestTrim:
    @pytest.mark.parametrize("text", ["\ufeff", "\ufeff ", "\u00a0\u3000", "\u2028\t"])
    def test_browser_whitespace_is_blank(self, text):
        store = make_store()
        assert store.add(text) is None
        assert store.tasks == []

    def test_trims_byte_order_mark(self):
        store = make_store()
        assert store.add("\ufeffBuy milk\u00a0").text == "Buy milk"

    def test_keeps_separator_controls(self):
        store = make_store()
        assert store.add("\x1cA\x1f").text == "\x1cA\x1f"

    def test_snapshot_with_only_byte_order_mark_is_malformed(self):
        raw = '[{"id": "1", "text": "\\ufeff", "done": false}]'
        store = TaskListStore(InMemorySnapshotStorage({KEY: raw}), key=KEY)
        assert store.load() == []


class TestThreading:
    def test_load_blocks_concurrent_commands(self):
        storage = SlowReadStorage()
        store = TaskListStore(storage, key=KEY)
        loader = threading.Thread(target=store.load)
        loader.start()
        assert storage.reading.wait(timeout=5)
        store.add("added while loading")
        loader.join(timeout=5)
        assert [t.text for t in store.tasks] == ["added while loading"]

    def test_get_store_builds_one_instance_across_threads(self, monkeypatch):
        storage = SlowReadStorage()
        monkeypatch.setattr(store_module, "_default_store", None)
        monkeypatch.setattr(store_module, "get_snapshot_storage", lambda settings: storage)

        stores = []
        barrier = threading.Barrier(2)

        def worker(text):
            barrier.wait()
            s = get_store()
            s.add(text)
            stores.append(s)

        threads = [threading.Thread(target=worker, args=(text,)) for text in ("a", "b")]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert len(stores) == 2
        assert stores[0] is stores[1]
        assert sorted(t.text for t in stores[0].tasks) == ["a", "b"]
        assert sorted(t.text for t in decode_snapshot(storage.get_item(KEY))) == ["a", "b"]
