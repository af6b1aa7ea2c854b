from __future__ import annotations

import asyncio

from _infra import FakeBackend, banner, run

from lazycombinators import AsyncFunction, Emitter, StopError


async def main() -> None:
    banner("03_event_gate: start on an event, stop cooperatively")

    bus = Emitter()
    api = FakeBackend(name="api", delay_seconds=0.01)

    on_ready = AsyncFunction(api.fetch_user).gated_by_event(
        lambda status: status == "ready", bus, "status", timeout=1.0
    )
    pending = asyncio.create_task(on_ready(1))
    await asyncio.sleep(0)
    bus.emit("status", "warming")
    bus.emit("status", "ready")
    print(await pending)

    flaky = FakeBackend(name="flaky", failures_before_ok=1_000)
    retrying = AsyncFunction(flaky.fetch_user).with_retry(None, base_delay=0.05)
    task = asyncio.create_task(retrying(2))
    await asyncio.sleep(0.2)
    retrying.stopped = True
    try:
        await task
    except StopError as exc:
        print(f"stopped after {exc.attempts} attempt(s)")


if __name__ == "__main__":
    run(main)
