import logging
import threading

from metricscope.bucket import AtomicBucket
from metricscope.crusher import COUNTER_LOOP, Tally, crush, main, run_consumer, run_producer


def test_tally_accumulates():
    tally = Tally()
    tally.add(10, 2)
    tally.add(5, 1)
    assert (tally.total, tally.count) == (15, 3)


def test_producer_stops_after_one_round():
    stop = threading.Event()
    stop.set()
    tally = Tally()
    bucket = AtomicBucket()
    run_producer(stop, tally, bucket)
    values = bucket.data()
    assert tally.count == COUNTER_LOOP
    assert len(values) == COUNTER_LOOP
    assert sum(values) == tally.total
    assert all(0 <= value < 1024 for value in values)


def test_consumer_drains_everything():
    bucket = AtomicBucket()
    for value in range(200):
        bucket.push(value)
    stop = threading.Event()
    stop.set()
    total, count = run_consumer(stop, bucket)
    assert (total, count) == (sum(range(200)), 200)
    assert bucket.is_empty()


def test_crush_consumes_all_produced():
    report = crush(0, 2)
    assert report.consumed_total == report.produced_total
    assert report.consumed_count == report.produced_count
    assert report.produced_count % COUNTER_LOOP == 0
    assert report.produced_count >= 2 * COUNTER_LOOP


def test_main_reports(caplog):
    caplog.set_level(logging.INFO)
    assert main(["-d", "0", "-p", "1"]) == 0
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Consumer reported") for message in messages)
    assert any(message.startswith("Producer(s) reported") for message in messages)