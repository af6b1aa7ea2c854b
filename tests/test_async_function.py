"""AsyncFunction: async combinators and resilience.

Tests cover:
    - Sync and async callables, map / restrict / fallback / first_of
    - parallel ordering and concurrency
    - with_timeout classification and abandonment
    - with_retry timing, last-error identity, retry_on, stop semantics
    - gated_by_event start / stop / timeout and listener removal
    - adapt modes and path expansion
"""

import asyncio
import time

import pytest

from lazycombinators import (
    AsyncFunction,
    AsyncSequence,
    Emitter,
    PathChain,
    RestrictionError,
    Scope,
    StopError,
    StopSignal,
    TimeoutError,
)


class HttpError(Exception):
    def __init__(self, status_code):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


async def _double(x):
    await asyncio.sleep(0)
    return x * 2


# ---------------------------------------------------------------------------
# Core surface
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_wraps_sync_and_async_callables():
    assert await AsyncFunction(_double)(4) == 8
    assert await AsyncFunction(lambda x: x + 1)(4) == 5
    assert await AsyncFunction.coerce("constant")(1) == "constant"
    assert await AsyncFunction(_double).resolve(1, "extra") == 2


@pytest.mark.asyncio
async def test_building_runs_nothing():
    calls = []

    async def record(x):
        calls.append(x)
        return x

    fn = AsyncFunction(record).map(_double).with_timeout(1.0).with_retry(2).fallback(0)
    assert calls == []
    assert await fn(3) == 6
    assert calls == [3]


@pytest.mark.asyncio
async def test_map_with_async_steps_stops_at_none():
    calls = []
    assert await AsyncFunction(_double).map(_double, str)(1) == "4"
    assert await AsyncFunction(lambda x: None).map(lambda x: calls.append(x))(1) is None
    assert calls == []


@pytest.mark.asyncio
async def test_restrictions():
    async def positive(x):
        return x > 0

    fn = AsyncFunction(_double).restrict_input(positive)
    assert await fn(2) == 4
    assert await fn(-2) is None

    strict = AsyncFunction(_double).restrict_output(lambda r, x: r < 10, on_fail="too big")
    assert await strict(4) == 8
    with pytest.raises(RestrictionError, match="too big"):
        await strict(5)

    evens = AsyncFunction(lambda n: range(n)).restrict_each(lambda v: v % 2 == 0)
    assert await (await evens(5)).to_list() == [0, 2, 4]


@pytest.mark.asyncio
async def test_matching_and_bind():
    one = AsyncFunction.matching((1,), "one")
    assert await one(1) == "one"
    assert await one(2) is None
    with pytest.raises(NotImplementedError):
        AsyncFunction(_double).bind("k", 1)


@pytest.mark.asyncio
async def test_fallback_semantics():
    error = HttpError(500)

    async def failing(x):
        raise error

    async def absent(x):
        return None

    assert await AsyncFunction(absent).fallback(lambda x: x * 10)(2) == 20
    recovered = AsyncFunction(failing).fallback(lambda x, e: e.status_code, matcher=500)
    assert await recovered(1) == 500

    untouched = AsyncFunction(failing).fallback(lambda x: "cached", matcher=404)
    with pytest.raises(HttpError) as excinfo:
        await untouched(1)
    assert excinfo.value is error


@pytest.mark.asyncio
async def test_first_of():
    async def boom(x):
        raise RuntimeError(x)

    fn = AsyncFunction.first_of(boom, lambda x: None, _double)
    assert await fn(5) == 10


@pytest.mark.asyncio
async def test_slice_and_expand():
    sliced = AsyncFunction(lambda n: range(10)).slice(lambda v, i, n: v == n)
    assert await (await sliced(8)).to_list() == [8, 9]

    expanded = AsyncFunction(lambda n: [n, None, n + 1]).expand(lambda v: [v, v * 10] if v % 2 else None)
    result = await expanded(1)
    assert isinstance(result, AsyncSequence)
    assert await result.to_list() == [1, 10]


# ---------------------------------------------------------------------------
# parallel
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_parallel_orders_by_argument_and_runs_concurrently():
    async def slow(x):
        await asyncio.sleep(0.05)
        return ("slow", x)

    async def fast(x):
        return ("fast", x)

    started = time.monotonic()
    result = await AsyncFunction(slow).parallel(fast, slow)(1)
    elapsed = time.monotonic() - started

    assert result == (("slow", 1), ("fast", 1), ("slow", 1))
    assert elapsed < 0.09


@pytest.mark.asyncio
async def test_parallel_first_failure_in_argument_order_wins():
    first, second = ValueError("first"), KeyError("second")

    async def fail_late(x):
        await asyncio.sleep(0.02)
        raise first

    async def fail_early(x):
        raise second

    with pytest.raises(ValueError) as excinfo:
        await AsyncFunction.parallel_all(fail_late, fail_early)(1)
    assert excinfo.value is first


# ---------------------------------------------------------------------------
# with_timeout
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_timeout_raises_timeout_error():
    async def slow():
        await asyncio.sleep(0.05)
        return "late"

    with pytest.raises(TimeoutError) as excinfo:
        await AsyncFunction(slow).with_timeout(0.01)()
    assert excinfo.value.seconds == 0.01
    await asyncio.sleep(0.06)


@pytest.mark.asyncio
async def test_timed_out_computation_is_abandoned_not_cancelled():
    finished = asyncio.Event()

    async def slow():
        await asyncio.sleep(0.03)
        finished.set()
        return "late"

    with pytest.raises(TimeoutError):
        await AsyncFunction(slow).with_timeout(0.005)()
    assert not finished.is_set()
    await asyncio.wait_for(finished.wait(), 1.0)


@pytest.mark.asyncio
async def test_timeout_custom_error_and_fast_paths():
    custom = LookupError("too slow")

    async def slow():
        await asyncio.sleep(0.05)

    timed = AsyncFunction(slow).with_timeout(0.01, error=custom)
    raised = []
    for _ in range(2):
        with pytest.raises(LookupError, match="too slow") as excinfo:
            await timed()
        raised.append(excinfo.value)
    assert raised[0] is not raised[1]
    assert custom not in raised
    assert custom.__traceback__ is None

    with pytest.raises(PermissionError):
        await AsyncFunction(slow).with_timeout(0.01, error=PermissionError)()

    assert await AsyncFunction(_double).with_timeout(1.0)(2) == 4

    async def broken():
        raise KeyError("bad")

    with pytest.raises(KeyError):
        await AsyncFunction(broken).with_timeout(1.0)()
    await asyncio.sleep(0.06)


# ---------------------------------------------------------------------------
# with_retry
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_retry_waits_the_backoff_delays_before_succeeding():
    calls = []

    async def flaky():
        calls.append(time.monotonic())
        if len(calls) <= 2:
            raise ConnectionError(f"attempt {len(calls)}")
        return "ok"

    started = time.monotonic()
    assert await AsyncFunction(flaky).with_retry(4, base_delay=0.01, factor=2)() == "ok"
    elapsed = time.monotonic() - started

    assert len(calls) == 3
    assert elapsed >= 0.03 - 0.005
    assert calls[2] - calls[1] >= calls[1] - calls[0] - 0.005


@pytest.mark.asyncio
async def test_exhausted_retry_raises_the_last_error():
    errors = []

    async def always_fails():
        errors.append(ConnectionError(f"attempt {len(errors) + 1}"))
        raise errors[-1]

    with pytest.raises(ConnectionError) as excinfo:
        await AsyncFunction(always_fails).with_retry(3)()
    assert len(errors) == 3
    assert excinfo.value is errors[-1]


@pytest.mark.asyncio
async def test_retry_on_lets_other_errors_through():
    calls = []

    async def not_found():
        calls.append(1)
        raise HttpError(404)

    with pytest.raises(HttpError):
        await AsyncFunction(not_found).with_retry(5, retry_on=(503, TimeoutError))()
    assert calls == [1]


@pytest.mark.asyncio
async def test_stopping_an_unbounded_retry():
    calls = []

    async def always_fails():
        calls.append(1)
        raise ConnectionError("down")

    fn = AsyncFunction(always_fails).with_retry(None, base_delay=10.0)
    task = asyncio.create_task(fn())
    await asyncio.sleep(0.01)
    assert calls == [1]

    fn.stopped = True
    with pytest.raises(StopError):
        await asyncio.wait_for(task, 0.5)
    assert calls == [1]


@pytest.mark.asyncio
async def test_stopped_before_the_first_attempt():
    calls = []
    fn = AsyncFunction(lambda: calls.append(1)).with_retry(3)
    fn.stopped = True
    with pytest.raises(StopError):
        await fn()
    assert calls == []


def test_one_retrying_function_serves_several_event_loops():
    calls = []

    async def fails_every_other_call():
        calls.append(1)
        if len(calls) % 2:
            raise ConnectionError("once")
        return "ok"

    fn = AsyncFunction(fails_every_other_call).with_retry(3, base_delay=0.001)
    assert asyncio.run(fn()) == "ok"
    assert asyncio.run(fn()) == "ok"
    assert len(calls) == 4
    assert not fn.stopped


def test_one_gated_function_serves_several_event_loops():
    emitter = Emitter()
    fn = AsyncFunction(_double).gated_by_event(None, emitter, "ready", timeout=1.0)

    async def trigger(n):
        task = asyncio.create_task(fn(n))
        await asyncio.sleep(0.01)
        emitter.emit("ready")
        return await task

    assert asyncio.run(trigger(1)) == 2
    assert asyncio.run(trigger(2)) == 4
    assert emitter.listener_count("ready") == 0


@pytest.mark.asyncio
async def test_stop_signal_survives_chaining_and_can_be_shared():
    signal = StopSignal()
    retrying = AsyncFunction(_double).with_retry(2, signal=signal)
    chained = retrying.map(str)
    assert chained.signal is signal
    assert not chained.stopped
    assert await chained(2) == "4"
    with pytest.raises(AttributeError):
        AsyncFunction(_double).stopped = True


# ---------------------------------------------------------------------------
# gated_by_event
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_gate_starts_on_matching_event():
    emitter = Emitter()
    calls = []
    fn = AsyncFunction(lambda x: calls.append(x) or x * 2).gated_by_event(
        lambda value: value == "go", emitter, "ready", timeout=1.0
    )

    task = asyncio.create_task(fn(21))
    await asyncio.sleep(0.01)
    assert emitter.listener_count("ready") == 1

    emitter.emit("ready", "wait")
    await asyncio.sleep(0.01)
    assert calls == []

    emitter.emit("ready", "go")
    assert await task == 42
    assert emitter.listener_count("ready") == 0


@pytest.mark.asyncio
async def test_gate_times_out_and_removes_its_listener():
    emitter = Emitter()
    fn = AsyncFunction(_double).gated_by_event(None, emitter, "ready", timeout=0.02)
    with pytest.raises(TimeoutError):
        await fn(1)
    assert emitter.listener_count("ready") == 0


@pytest.mark.asyncio
async def test_gate_stop_signal():
    emitter = Emitter()
    fn = AsyncFunction(_double).gated_by_event(None, emitter, "ready", timeout=1.0)
    task = asyncio.create_task(fn(1))
    await asyncio.sleep(0.01)
    fn.stopped = True
    with pytest.raises(StopError):
        await task
    assert emitter.listener_count("ready") == 0


@pytest.mark.asyncio
async def test_gate_stop_mode_releases_without_cancelling():
    emitter = Emitter()
    started, release = asyncio.Event(), asyncio.Event()
    finished = []

    async def work():
        started.set()
        await release.wait()
        finished.append(True)
        return "done"

    fn = AsyncFunction(work).gated_by_event(lambda reason: reason == "halt", emitter, "control", timeout=1.0, start=False)
    task = asyncio.create_task(fn())
    await asyncio.wait_for(started.wait(), 1.0)

    emitter.emit("control", "pause")
    await asyncio.sleep(0.01)
    assert not task.done()

    emitter.emit("control", "halt")
    assert await task is None
    assert emitter.listener_count("control") == 0

    release.set()
    await asyncio.sleep(0.01)
    assert finished == [True]


@pytest.mark.asyncio
async def test_gate_stop_mode_propagates_an_early_failure():
    emitter = Emitter()
    error = ValueError("crashed")

    async def work():
        raise error

    fn = AsyncFunction(work).gated_by_event(None, emitter, "control", timeout=1.0, start=False)
    with pytest.raises(ValueError) as excinfo:
        await fn()
    assert excinfo.value is error
    assert emitter.listener_count("control") == 0


class CountingSource:
    """add_event_listener / remove_event_listener convention."""

    def __init__(self):
        self.listeners = {}
        self.removals = 0

    def add_event_listener(self, event_name, listener):
        self.listeners[event_name] = listener

    def remove_event_listener(self, event_name, listener):
        self.removals += 1
        del self.listeners[event_name]

    def fire(self, event_name, *args):
        self.listeners[event_name](*args)


@pytest.mark.asyncio
@pytest.mark.parametrize("outcome", ["match", "timeout", "error"])
async def test_listener_is_removed_exactly_once(outcome):
    source = CountingSource()

    async def work():
        if outcome == "error":
            raise RuntimeError("boom")
        return "ok"

    fn = AsyncFunction(work).gated_by_event(None, source, "ready", timeout=0.02)
    task = asyncio.create_task(fn())
    await asyncio.sleep(0.005)
    if outcome != "timeout":
        source.fire("ready")

    if outcome == "match":
        assert await task == "ok"
    elif outcome == "timeout":
        with pytest.raises(TimeoutError):
            await task
    else:
        with pytest.raises(RuntimeError):
            await task
    assert source.removals == 1


# ---------------------------------------------------------------------------
# adapt / paths
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_adapt_modes():
    add = AsyncFunction(lambda a, b: a + b)
    assert await add.adapt(0, 10)(5) == 15
    assert await AsyncFunction(lambda a, b: (a, b)).adapt(1)(5) == (5, None)
    assert await add.adapt(["a", "b"])({"a": 1, "b": 2}) == 3

    root = Scope().let("b", 5)
    child = Scope().let("a", 1)
    root.let_child("c", child)
    assert await add.adapt(["a", "b"], "sum")(child) is child
    assert child.get("sum") == 6

    assert await AsyncFunction(_double).adapt(None, "out")(3) == {"out": 6}


@pytest.mark.asyncio
async def test_path_expansion():
    async def neighbours(x):
        return [x + 1, None, x + 2]

    step = AsyncFunction(neighbours).adapt()
    children = await (await step(PathChain.of(0))).to_list()
    assert [c.to_list() for c in children] == [[0, 1], [0, 2]]

    paths = AsyncFunction.expand_paths(neighbours, lambda x: [x * 10])
    first = await (await paths(1)).to_list()
    assert [c.to_list() for c in first] == [[1, 2], [1, 3]]
    second = await (await paths(first[0])).to_list()
    assert [c.to_list() for c in second] == [[1, 2, 20]]
    assert await (await paths(second[0])).to_list() == []
