"""
Run blocking Docker SDK calls without stalling the event loop
"""

import asyncio
import functools
from typing import Any, Callable


async def async_docker_call(func: Callable[..., Any], *args, **kwargs) -> Any:
    """
    Execute a synchronous Docker SDK call in the default thread pool.

    Example:
        containers = await async_docker_call(client.containers.list, all=True)
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))
