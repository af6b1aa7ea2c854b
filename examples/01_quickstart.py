from __future__ import annotations

from _infra import FakeBackend, FakeCache, HttpError, User, banner, run

from lazycombinators import AsyncFunction, SyncSequence, TimeoutError


async def main() -> None:
    banner("01_quickstart: timeout + retry + fallback")

    api = FakeBackend(name="api", delay_seconds=0.01, failures_before_ok=2)
    cache = FakeCache(users={7: User(id=7, name="cached")})

    fetch = (
        AsyncFunction(api.fetch_user)
        .with_timeout(0.2)
        .with_retry(3, base_delay=0.01, retry_on=(503, TimeoutError))
        .fallback(lambda user_id, error: cache.get_user(user_id), matcher=HttpError)
        .map(lambda user: f"hello, {user.name}")
    )

    print(await fetch(42))

    ids = SyncSequence.of(1, 2, 3, 4).restrict(lambda n: n % 2 == 0).map(lambda n, i: (i, n * 10))
    print(ids.to_list())


if __name__ == "__main__":
    run(main)
