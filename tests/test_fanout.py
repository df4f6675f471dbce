import asyncio

import pytest

from secreq_api.application.fanout import gather_all


def _delayed(value, delay, log=None):
    async def call():
        await asyncio.sleep(delay)
        if log is not None:
            log.append(value)
        return value
    return call


def test_results_follow_input_order_not_completion_order():
    completion = []
    calls = [_delayed(i, 0.005 * (5 - i), completion) for i in range(6)]

    results = asyncio.run(gather_all(calls))

    assert results == [0, 1, 2, 3, 4, 5]
    assert completion[0] == 5


def test_empty_input_returns_empty_list():
    assert asyncio.run(gather_all([])) == []


def test_first_failure_propagates_and_cancels_stragglers():
    cancelled = []

    async def slow():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.append(True)
            raise
        return "late"

    async def failing():
        await asyncio.sleep(0.001)
        raise RuntimeError("provider down")

    with pytest.raises(RuntimeError, match="provider down"):
        asyncio.run(gather_all([slow, failing, slow]))

    assert len(cancelled) == 2


def test_simultaneous_failures_raise_lowest_index():
    def failing(message):
        async def call():
            raise RuntimeError(message)
        return call

    # both settle in the same loop pass, before any cancellation
    with pytest.raises(RuntimeError, match="first"):
        asyncio.run(gather_all([failing("first"), failing("second")]))


def test_concurrency_is_bounded():
    in_flight = 0
    peak = 0

    async def tracked():
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.002)
        in_flight -= 1
        return peak

    results = asyncio.run(gather_all([tracked] * 10, max_concurrency=3))

    assert len(results) == 10
    assert peak == 3


def test_invalid_concurrency_rejected():
    with pytest.raises(ValueError):
        asyncio.run(gather_all([_delayed(1, 0)], max_concurrency=0))
