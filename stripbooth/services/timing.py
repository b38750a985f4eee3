import asyncio
import inspect
from typing import Awaitable, Callable, Optional, Union

Step = Callable[[], Union[None, Awaitable[None]]]


async def wait(seconds: float) -> None:
    await asyncio.sleep(max(seconds, 0))


async def countdown(seconds: int, on_tick: Optional[Callable[[int], Awaitable[None]]] = None,
                    tick: float = 1.0) -> None:
    """Count down from ``seconds`` to 1, one tick per ``tick`` seconds."""
    for remaining in range(seconds, 0, -1):
        if on_tick is not None:
            await on_tick(remaining)
        await wait(tick)


async def run_for(duration: float, step: Step, interval: float) -> int:
    """Call ``step`` every ``interval`` seconds until ``duration`` has elapsed.

    The loop clock is the only thing that ends the run; ``step`` cannot stop
    it early. Returns how many times ``step`` ran.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + duration
    calls = 0

    while loop.time() < deadline:
        result = step()
        if inspect.isawaitable(result):
            await result
        calls += 1
        await asyncio.sleep(min(interval, max(deadline - loop.time(), 0)))
    return calls
