"""
Scripted medicine-delivery animation.

The whole cutscene is a flat list of declarative steps:

    Rotate(target, axis, start, end, duration)  – eased tween of one angle
    Pause(duration)                             – hold still
    Attach(obj, parent, position)               – reparent instantly

DeliveryAnimation walks the list one step at a time, only moving on once the
previous step has finished, and calls its completion callback exactly once
at the very end. There is no cancellation and no failure path.
"""

import asyncio
import math
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence, Tuple, Union

from arm import PATIENT_POSITION, Arm
from config import FRAME_INTERVAL


@dataclass(frozen=True)
class Rotate:
    target: str
    axis: str
    start: float
    end: float
    duration: float  # seconds


@dataclass(frozen=True)
class Pause:
    duration: float


@dataclass(frozen=True)
class Attach:
    obj: str
    parent: str
    position: Tuple[float, float, float]


Step = Union[Rotate, Pause, Attach]

_SWING = math.pi / 1.8
_ELBOW = math.pi / 3.5
_WRIST = math.pi / 6

DELIVERY_SCRIPT: Tuple[Step, ...] = (
    # reach the shelf
    Rotate("segment1", "y", 0, -_SWING, 1.0),
    Rotate("segment2", "z", 0, _ELBOW, 1.0),
    Rotate("segment3", "z", 0, _WRIST, 0.8),
    Pause(0.3),
    Attach("medicine", "segment3", (0.0, 1.5, 0.0)),
    # carry it over to the patient
    Rotate("segment3", "z", _WRIST, 0, 0.8),
    Rotate("segment2", "z", _ELBOW, 0, 1.0),
    Rotate("segment1", "y", -_SWING, _SWING, 1.5),
    Rotate("segment2", "z", 0, _ELBOW, 1.0),
    Rotate("segment3", "z", 0, _WRIST, 0.8),
    Pause(0.5),
    Attach("medicine", "scene", PATIENT_POSITION),
    # home position
    Rotate("segment3", "z", _WRIST, 0, 0.8),
    Rotate("segment2", "z", _ELBOW, 0, 1.0),
    Rotate("segment1", "y", _SWING, 0, 1.2),
)


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


def script_duration(steps: Sequence[Step] = DELIVERY_SCRIPT) -> float:
    """Nominal running time of a script in seconds."""
    return sum(getattr(step, "duration", 0.0) for step in steps)


class DeliveryAnimation:
    """
    Single-use executor for a step script.

    The executor owns the arm's nodes while it plays. `on_frame` receives
    `arm.pose()` after every visible change, which is how the WebSocket
    server streams the animation to clients. `clock` and `sleep` default to
    the real monotonic clock and asyncio.sleep.
    """

    def __init__(
        self,
        arm: Arm,
        steps: Sequence[Step] = DELIVERY_SCRIPT,
        on_frame: Optional[Callable[[dict], None]] = None,
        time_scale: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        frame_interval: float = FRAME_INTERVAL,
    ):
        if time_scale <= 0:
            raise ValueError("time_scale must be positive")
        self.arm = arm
        self.steps = tuple(steps)
        self.on_frame = on_frame
        self.time_scale = time_scale
        self._clock = clock
        self._sleep = sleep
        self._frame_interval = frame_interval
        self._started = False
        self.finished = False

    async def play(self, on_complete: Optional[Callable[[], None]] = None) -> dict:
        """Run every step in order, then call `on_complete` once. Returns the final pose."""
        if self._started:
            raise RuntimeError("DeliveryAnimation can only be played once")
        self._started = True

        for step in self.steps:
            if isinstance(step, Rotate):
                await self._rotate(step)
            elif isinstance(step, Pause):
                await self._sleep(step.duration / self.time_scale)
            elif isinstance(step, Attach):
                self._attach(step)
            else:
                raise TypeError(f"Unknown animation step: {step!r}")

        self.finished = True
        if on_complete is not None:
            on_complete()
        return self.arm.pose()

    async def _rotate(self, step: Rotate):
        node = self.arm.node(step.target)
        start_value = node.rotation[step.axis]  # tween from wherever the joint is now
        duration = step.duration / self.time_scale
        started_at = self._clock()

        while True:
            elapsed = self._clock() - started_at
            progress = min(elapsed / duration, 1.0) if duration > 0 else 1.0
            if progress >= 1.0:
                node.rotation[step.axis] = step.end
                self._emit()
                return
            eased = ease_in_out_cubic(progress)
            node.rotation[step.axis] = start_value + (step.end - start_value) * eased
            self._emit()
            await self._sleep(self._frame_interval)

    def _attach(self, step: Attach):
        obj = self.arm.node(step.obj)
        self.arm.node(step.parent).add(obj)
        obj.position = tuple(step.position)
        self._emit()

    def _emit(self):
        if self.on_frame is not None:
            self.on_frame(self.arm.pose())
