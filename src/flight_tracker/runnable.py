from abc import ABC, abstractmethod
import asyncio

from flight_tracker.config import AlreadyStartedError
from flight_tracker.log import log


class Runnable(ABC):
    """
    Runnable implements an asynchronous "run until told to stop" loop. The loop begins when `run` is awaited, or when
    `start` spawns it as a task on the running event loop, and can be stopped by calling `stop`. Subclasses implement
    `step`, which is awaited on each loop cycle. Subclasses can also implement `setup` and/or `teardown` if they need to
    do any pre- or post-loop work.

    When the loop was spawned with `start`, `stop` also cancels the task, so a step blocked on I/O or sleeping is
    interrupted immediately rather than at the end of the current cycle. `teardown` runs in either case.
    """

    def __init__(self, name: str | None = None):
        if name is None:
            self._name = type(self).__name__
        else:
            self._name = name
        self._running = False
        self._task: asyncio.Task[None] | None = None

    def start(self) -> asyncio.Task[None]:
        """
        Spawn `run` as a task on the running event loop. A Runnable can only be started once.
        """
        if self._task is not None:
            raise AlreadyStartedError(f"{self._name} cannot be started more than once")
        self._running = True
        self._task = asyncio.get_running_loop().create_task(self.run(), name=self._name)
        return self._task

    async def run(self) -> None:
        log(f"{self._name} starting")
        self._running = True
        try:
            await self.setup()
            log(f"{self._name} started")

            while self._running:
                await self.step()
        finally:
            await self.teardown()
            log(f"{self._name} stopped")

    def stop(self) -> None:
        if self._running:
            log(f"{self._name} stopping")
        self._running = False
        if self._task is not None and self._task is not asyncio.current_task():
            self._task.cancel()

    async def join(self) -> None:
        """
        Wait for a started Runnable to finish. Cancellation of the Runnable's own task is not an error; any other
        exception that ended the loop is re-raised here.
        """
        if self._task is None:
            return
        await asyncio.wait([self._task])
        if not self._task.cancelled() and self._task.exception() is not None:
            raise self._task.exception()  # type: ignore

    def is_running(self) -> bool:
        return self._running

    @abstractmethod
    async def step(self) -> None: ...

    async def setup(self) -> None:
        pass

    async def teardown(self) -> None:
        pass
