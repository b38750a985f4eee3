import asyncio

from stripbooth.services.timing import countdown, run_for


async def test_countdown_ticks_down_to_one():
    ticks = []

    async def on_tick(value):
        ticks.append(value)

    await countdown(4, on_tick, tick=0.001)
    assert ticks == [4, 3, 2, 1]


async def test_run_for_is_bounded_by_duration_not_by_step():
    loop = asyncio.get_running_loop()
    calls = []
    started = loop.time()

    count = await run_for(0.1, lambda: calls.append(loop.time()), 0.01)

    elapsed = loop.time() - started
    assert 0.1 <= elapsed < 0.3
    assert count == len(calls)
    assert count >= 3


async def test_run_for_awaits_async_steps():
    seen = []

    async def step():
        seen.append(1)
        await asyncio.sleep(0)

    await run_for(0.03, step, 0.005)
    assert seen
