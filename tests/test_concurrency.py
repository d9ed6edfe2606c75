import threading
from concurrent.futures import ThreadPoolExecutor

from sqlalchemy import Engine

from sqlqueue.core.bootstrap import SchemaBootstrapper
from sqlqueue.core.codec import JsonCodec
from sqlqueue.core.queue import SqlQueue

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _drain(queue: SqlQueue[int]) -> list[int]:
    claimed: list[int] = []
    while (result := queue.peek()) is not None:
        record_id, _ = result
        claimed.append(record_id)
    return claimed


# ---------------------------------------------------------------------------
# Competing consumers
# ---------------------------------------------------------------------------


def test_concurrent_claimants_never_share_a_record(queue: SqlQueue[int]) -> None:
    for i in range(60):
        queue.enqueue(i)
    inserted = {r.id for r in queue.read_records()}

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda _: _drain(queue), range(4)))

    all_claimed = [record_id for claimed in results for record_id in claimed]
    assert len(all_claimed) == len(set(all_claimed))
    assert set(all_claimed) == inserted


def test_consumers_on_separate_handles(engine: Engine) -> None:
    bootstrapper = SchemaBootstrapper()
    producer = SqlQueue(engine, "main", "Shared", JsonCodec(int), bootstrapper)
    for i in range(30):
        producer.enqueue(i)

    consumers = [SqlQueue(engine, "main", "Shared", JsonCodec(int), bootstrapper) for _ in range(3)]
    with ThreadPoolExecutor(max_workers=3) as pool:
        results = list(pool.map(_drain, consumers))

    all_claimed = [record_id for claimed in results for record_id in claimed]
    assert len(all_claimed) == 30
    assert len(set(all_claimed)) == 30


def test_concurrent_producers_and_consumers(queue: SqlQueue[int]) -> None:
    produced = 40
    done = threading.Event()
    claimed: list[int] = []
    lock = threading.Lock()

    def _produce(offset: int) -> None:
        for i in range(produced // 2):
            queue.enqueue(offset + i)

    def _consume() -> None:
        while True:
            result = queue.peek()
            if result is None:
                if done.is_set():
                    return
                continue
            record_id, _ = result
            queue.dequeue(record_id)
            with lock:
                claimed.append(record_id)

    consumers = [threading.Thread(target=_consume) for _ in range(3)]
    for t in consumers:
        t.start()
    with ThreadPoolExecutor(max_workers=2) as pool:
        list(pool.map(_produce, (0, 1000)))
    done.set()
    for t in consumers:
        t.join()

    assert len(claimed) == len(set(claimed))
    # A consumer may observe `done` between the last enqueue and its claim.
    assert len(claimed) + queue.count() == produced
