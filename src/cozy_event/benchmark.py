"""Micro-benchmarks for the hot EventBus paths."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import time

from .bus import EventBus
from .scheduler import DeferredQueue

EVENT_NAME = "test"


def _noop(*args: object) -> None:
    return None


@dataclass
class BenchmarkResult:
    scenario: str
    listeners: int
    iterations: int
    seconds: float

    @property
    def ops_per_second(self) -> float:
        if self.seconds <= 0:
            return float("inf")
        return self.iterations / self.seconds

    def format(self) -> str:
        return (
            f"{self.scenario:<22} listeners={self.listeners:<6} "
            f"iterations={self.iterations:<10} {self.ops_per_second:,.0f} ops/sec"
        )


def _loaded_bus(listeners: int, queue: DeferredQueue | None = None) -> EventBus:
    bus = EventBus(queue=queue)
    for _ in range(listeners):
        bus.on(EVENT_NAME, _noop)
    return bus


def bench_emit(listeners: int, iterations: int) -> float:
    bus = _loaded_bus(listeners)
    emit = bus.emit_sync
    start = time.perf_counter()
    for _ in range(iterations):
        emit(EVENT_NAME, _noop)
    return time.perf_counter() - start


def bench_emit_deferred(listeners: int, iterations: int) -> float:
    # No loop is running here, so batches wait in the queue until flushed.
    bus = _loaded_bus(listeners, DeferredQueue())
    emit = bus.emit_deferred
    start = time.perf_counter()
    for _ in range(iterations):
        emit(EVENT_NAME, _noop)
    bus.flush()
    return time.perf_counter() - start


def bench_remove_all_listeners(listeners: int, iterations: int) -> float:
    bus = EventBus()
    start = time.perf_counter()
    for _ in range(iterations):
        for index in range(listeners):
            bus.on(f"{EVENT_NAME}{index}", _noop)
        bus.remove_all_listeners()
    return time.perf_counter() - start


def bench_on_off(listeners: int, iterations: int) -> float:
    bus = _loaded_bus(listeners - 1)

    def toggled(*args: object) -> None:
        return None

    start = time.perf_counter()
    for _ in range(iterations):
        bus.on(EVENT_NAME, toggled)
        bus.off(EVENT_NAME, toggled)
    return time.perf_counter() - start


SCENARIOS: dict[str, Callable[[int, int], float]] = {
    "emit": bench_emit,
    "emit-deferred": bench_emit_deferred,
    "remove-all-listeners": bench_remove_all_listeners,
    "on-off": bench_on_off,
}


def run_benchmarks(
    scenarios: list[str], listeners: int, iterations: int
) -> list[BenchmarkResult]:
    """Run the named scenarios in order and collect their timings."""
    results: list[BenchmarkResult] = []
    for scenario in scenarios:
        seconds = SCENARIOS[scenario](listeners, iterations)
        results.append(BenchmarkResult(scenario, listeners, iterations, seconds))
    return results
