from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

from sqlalchemy import select

from buildorders.app.db.models.models_v1 import OrderNumberCounter
from buildorders.services.order_numbers import allocate_order_number, format_order_number


def test_format_is_zero_padded():
    assert format_order_number(1) == "PO-0001"
    assert format_order_number(4) == "PO-0004"
    assert format_order_number(9999) == "PO-9999"
    assert format_order_number(12345) == "PO-12345"


def test_sequential_allocation_per_project(session_factory, seed):
    with session_factory() as db:
        numbers = [allocate_order_number(db, seed.project_id) for _ in range(3)]
        other = allocate_order_number(db, seed.other_project_id)
        db.commit()

    assert numbers == ["PO-0001", "PO-0002", "PO-0003"]
    # compteur indépendant par projet
    assert other == "PO-0001"


def test_rollback_does_not_consume_number(session_factory, seed):
    with session_factory() as db:
        assert allocate_order_number(db, seed.project_id) == "PO-0001"
        db.commit()

    with session_factory() as db:
        assert allocate_order_number(db, seed.project_id) == "PO-0002"
        db.rollback()

    with session_factory() as db:
        assert allocate_order_number(db, seed.project_id) == "PO-0002"
        db.commit()

    with session_factory() as db:
        counter = db.execute(
            select(OrderNumberCounter).where(OrderNumberCounter.project_id == seed.project_id)
        ).scalar_one()
        assert counter.last_value == 2


def test_concurrent_allocations_are_distinct(session_factory, seed):
    num_threads = 8
    barrier = Barrier(num_threads, timeout=30)

    def allocate(_):
        barrier.wait()
        with session_factory() as db:
            number = allocate_order_number(db, seed.project_id)
            db.commit()
            return number

    with ThreadPoolExecutor(max_workers=num_threads) as pool:
        numbers = list(pool.map(allocate, range(num_threads)))

    assert len(set(numbers)) == num_threads
    assert sorted(numbers) == [format_order_number(i) for i in range(1, num_threads + 1)]
