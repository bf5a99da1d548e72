from speed_monitor.storage import SpeedResultStore


def _row(user_id="alice", **overrides):
    row = {"user_id": user_id, "timestamp": "2024-01-15T10:00:00.000Z", "status": "success"}
    row.update(overrides)
    return row


def test_schema_creates_indexes(store):
    assert store.index_names() == ["idx_timestamp", "idx_user_id"]


def test_insert_returns_increasing_ids(store):
    ids = [store.insert(_row()) for _ in range(3)]
    assert ids == sorted(ids)
    assert len(set(ids)) == 3
    assert store.count() == 3


def test_created_at_assigned_by_storage(store):
    new_id = store.insert(_row())
    row = store.fetch_one("SELECT created_at FROM speed_results WHERE id = ?", (new_id,))
    assert row["created_at"]


def test_init_schema_is_idempotent(tmp_path):
    db_path = str(tmp_path / "speed.db")
    store = SpeedResultStore(db_path)
    store.init_schema()
    store.insert(_row())
    store.close()

    reopened = SpeedResultStore(db_path)
    reopened.init_schema()
    reopened.init_schema()
    assert reopened.count() == 1
    assert reopened.index_names() == ["idx_timestamp", "idx_user_id"]
    reopened.close()


def test_fetch_one_empty(store):
    assert store.fetch_one("SELECT * FROM speed_results WHERE id = ?", (1,)) is None
