"""Stress test that pushes values into an AtomicBucket from many threads while draining it."""

from __future__ import annotations

import argparse
import logging
import random
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from metricscope.bucket import AtomicBucket

logger = logging.getLogger(__name__)

COUNTER_LOOP = 1024
PUSH_BATCH = 32
CONSUMER_INTERVAL = 1.0
DEFAULT_DURATION = 60


@dataclass
class Tally:
    """Running total and count of values, shared between producer threads."""

    total: int = 0
    count: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, total: int, count: int) -> None:
        """Add a batch's total and count."""
        with self._lock:
            self.total += total
            self.count += count


@dataclass(frozen=True)
class CrushReport:
    """What the producers pushed and what the consumer drained."""

    produced_total: int
    produced_count: int
    consumed_total: int
    consumed_count: int


def run_producer(stop: threading.Event, tally: Tally, bucket: AtomicBucket[int]) -> None:
    """Push random values in batches until ``stop`` is set, recording them in ``tally``."""
    rng = random.Random()
    total_local = 0
    counter_local = 0
    while True:
        if counter_local == COUNTER_LOOP:
            tally.add(total_local, counter_local)
            total_local = 0
            counter_local = 0
            if stop.is_set():
                break

        value = rng.randrange(1024)
        for _ in range(PUSH_BATCH):
            bucket.push(value)
        total_local += value * PUSH_BATCH
        counter_local += PUSH_BATCH

    logger.info("producer finished")


def run_consumer(stop: threading.Event, bucket: AtomicBucket[int]) -> tuple[int, int]:
    """Drain the bucket about once a second until ``stop`` is set and it is empty.

    Returns the total and the count of all drained values.
    """
    total = 0
    counter = 0
    while True:
        is_done = stop.is_set()
        start = time.monotonic()

        local_total = 0
        local_counter = 0

        def collect(values: list[int]) -> None:
            nonlocal local_total, local_counter
            local_counter += len(values)
            local_total += sum(values)

        logger.debug("clearing")
        bucket.clear_with(collect)
        delta = time.monotonic() - start

        if is_done and local_counter == 0:
            break

        total += local_total
        counter += local_counter

        remaining = CONSUMER_INTERVAL - delta
        if remaining > 0:
            stop.wait(remaining)

    logger.info("consumer finished")
    return total, counter


def crush(duration: float, producers: int) -> CrushReport:
    """Run ``producers`` producer threads and one consumer for ``duration`` seconds."""
    producer_stop = threading.Event()
    consumer_stop = threading.Event()
    tally = Tally()
    bucket: AtomicBucket[int] = AtomicBucket()

    with ThreadPoolExecutor(max_workers=producers + 1) as pool:
        consumer = pool.submit(run_consumer, consumer_stop, bucket)
        workers = [
            pool.submit(run_producer, producer_stop, tally, bucket) for _ in range(producers)
        ]

        time.sleep(duration)

        producer_stop.set()
        for worker in workers:
            error = worker.exception()
            if error is not None:
                logger.error("encountered error for producer: %r", error)

        consumer_stop.set()
        consumed_total, consumed_count = consumer.result()

    return CrushReport(tally.total, tally.count, consumed_total, consumed_count)


def _parse_duration(text: str) -> int:
    try:
        seconds = int(text)
    except ValueError:
        return DEFAULT_DURATION
    return seconds if seconds >= 0 else DEFAULT_DURATION


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(prog="bucket-crusher")
    parser.add_argument(
        "-d", "--duration", default=str(DEFAULT_DURATION), metavar="INTEGER",
        help="number of seconds to run the crusher test",
    )
    parser.add_argument(
        "-p", "--producers", type=int, default=1, metavar="INTEGER",
        help="number of producers",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    logger.info("bucket-crusher")

    duration = _parse_duration(args.duration)
    logger.info("duration: %ss", duration)
    logger.info("producers: %d", args.producers)

    report = crush(duration, args.producers)
    logger.info(
        "Producer(s) reported: %d total, with %d values produced",
        report.produced_total, report.produced_count,
    )
    logger.info(
        "Consumer reported:    %d total, with %d values consumed",
        report.consumed_total, report.consumed_count,
    )
    return 0