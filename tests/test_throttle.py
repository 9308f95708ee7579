import asyncio

import pytest

from contentful_sync.throttle import RequestThrottle


def _max_in_window(times, period=1.0):
    return max(sum(1 for t in times if start <= t < start + period) for start in times)


async def test_dispatches_at_most_ceiling_per_window(clock):
    throttle = RequestThrottle(7, clock=clock, sleep=clock.sleep)
    dispatched = []

    async def call(i):
        dispatched.append((i, clock()))
        return i

    results = await asyncio.gather(*(throttle.enqueue(lambda i=i: call(i)) for i in range(20)))

    assert results == list(range(20))
    times = [t for _, t in dispatched]
    assert _max_in_window(times) <= 7
    assert times[:7] == [0.0] * 7
    assert times[7:14] == [1.0] * 7
    assert times[14:] == [2.0] * 6
    assert throttle.dispatched == 20


async def test_admits_in_submission_order(clock):
    throttle = RequestThrottle(3, clock=clock, sleep=clock.sleep)
    order = []

    async def call(i):
        order.append(i)

    await asyncio.gather(*(throttle.enqueue(lambda i=i: call(i)) for i in range(10)))

    assert order == list(range(10))


async def test_no_wait_below_ceiling(clock):
    throttle = RequestThrottle(7, clock=clock, sleep=clock.sleep)

    async def call():
        return "ok"

    for _ in range(7):
        assert await throttle.enqueue(call) == "ok"

    assert clock.sleeps == []


async def test_window_slides_with_time(clock):
    throttle = RequestThrottle(2, clock=clock, sleep=clock.sleep)

    async def call():
        return clock()

    assert await throttle.enqueue(call) == 0.0
    clock.now = 0.5
    assert await throttle.enqueue(call) == 0.5
    # oldest dispatch leaves the window at 1.0
    assert await throttle.enqueue(call) == 1.0
    assert clock.sleeps == [0.5]


async def test_thunk_errors_propagate_to_caller(clock):
    throttle = RequestThrottle(7, clock=clock, sleep=clock.sleep)

    async def boom():
        raise RuntimeError("network down")

    async def fine():
        return 1

    results = await asyncio.gather(throttle.enqueue(boom), throttle.enqueue(fine), return_exceptions=True)

    assert isinstance(results[0], RuntimeError)
    assert results[1] == 1
    assert throttle.dispatched == 2


async def test_real_clock_small_burst_completes():
    throttle = RequestThrottle(7)

    async def call():
        return True

    assert all(await asyncio.gather(*(throttle.enqueue(call) for _ in range(7))))


@pytest.mark.parametrize("rate, period", [(0, 1.0), (5, 0)])
def test_rejects_invalid_limits(rate, period):
    with pytest.raises(ValueError):
        RequestThrottle(rate, period=period)
