from datetime import UTC, datetime

import pytest

from sqlqueue.domain.models import QueueIdentity, QueueRecord, QueueStatus

# ---------------------------------------------------------------------------
# QueueStatus
# ---------------------------------------------------------------------------


def test_queue_status_values():
    assert QueueStatus.TO_PROCESS == 0
    assert QueueStatus.PROCESSING == 1


def test_queue_status_is_int():
    assert isinstance(QueueStatus.PROCESSING, int)


# ---------------------------------------------------------------------------
# QueueRecord
# ---------------------------------------------------------------------------


def _record(**overrides) -> QueueRecord:
    now = datetime.now(UTC)
    fields = {
        "id": 1,
        "enqueue_time": now,
        "status": 0,
        "last_operation_time": now,
        "data": "345",
    }
    fields.update(overrides)
    return QueueRecord(**fields)


def test_record_coerces_status_from_int():
    record = _record(status=1)
    assert record.status is QueueStatus.PROCESSING
    assert record.claimed


def test_record_to_process_is_not_claimed():
    assert not _record().claimed


def test_record_is_frozen():
    record = _record()
    with pytest.raises(Exception):
        record.status = QueueStatus.PROCESSING


def test_record_rejects_unknown_status():
    with pytest.raises(Exception):
        _record(status=7)


def test_record_validates_from_mapping():
    now = datetime.now(UTC)
    record = QueueRecord.model_validate(
        {
            "id": 42,
            "enqueue_time": now,
            "status": 0,
            "last_operation_time": now,
            "data": '{"a": 1}',
        }
    )
    assert record.id == 42
    assert record.data == '{"a": 1}'


# ---------------------------------------------------------------------------
# QueueIdentity
# ---------------------------------------------------------------------------


def test_identity_equal_for_same_fields():
    a = QueueIdentity(location="sqlite:///q.db", schema_name="main", name="Queue")
    b = QueueIdentity(location="sqlite:///q.db", schema_name="main", name="Queue")
    assert a == b
    assert hash(a) == hash(b)


def test_identity_differs_by_name():
    a = QueueIdentity(location="sqlite:///q.db", schema_name="main", name="A")
    b = QueueIdentity(location="sqlite:///q.db", schema_name="main", name="B")
    assert a != b
    assert len({a, b}) == 2


def test_identity_str():
    identity = QueueIdentity(location="sqlite:///q.db", schema_name="main", name="Queue")
    assert str(identity) == "sqlite:///q.db/main.Queue"
