from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union

logger = logging.getLogger(__name__)

AnimationCallback = Callable[[Any, int, int], None]

_DURATION_RE = re.compile(r"^([\d.]+)([fsmh])$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600}


def parse_duration(duration: Union[int, str, None], fps: int) -> int:
    """
    Convert a duration to frames. Ints are frames; strings carry a unit:
    'f' frames, 's' seconds, 'm' minutes, 'h' hours. None or a non-positive
    value means endless (-1).
    """
    if duration is None:
        return -1
    if isinstance(duration, str):
        m = _DURATION_RE.match(duration.strip())
        if m is None:
            raise ValueError(f"invalid duration: {duration!r}")
        amount, unit = float(m.group(1)), m.group(2)
        frames = int(amount if unit == "f" else amount * fps * _UNIT_SECONDS[unit])
    else:
        frames = int(duration)
    return frames if frames > 0 else -1


@dataclass(eq=False)
class Animation:
    callback: AnimationCallback
    duration: int = -1
    frame: int = 0

    @property
    def endless(self) -> bool:
        return self.duration <= 0

    @property
    def finished(self) -> bool:
        return not self.endless and self.frame > self.duration


class AnimationLoop:
    """
    Frame bookkeeping for running animations. Nothing here schedules
    itself: the owner calls step() once per frame.
    """

    def __init__(self, fps: int):
        self.fps = fps
        self.frame = 0
        self.animations: List[Animation] = []

    @property
    def running(self) -> bool:
        return bool(self.animations)

    def add(self, callback: AnimationCallback, duration: Union[int, str, None] = None) -> Animation:
        anim = Animation(callback=callback, duration=parse_duration(duration, self.fps))
        self.animations.append(anim)
        logger.debug("Animation started (%s frames)", "endless" if anim.endless else anim.duration)
        return anim

    def stop(self, callback: Optional[Union[AnimationCallback, bool]] = True) -> None:
        if callback is True:
            self.animations = []
        else:
            self.animations = [a for a in self.animations if a.callback != callback]
        if not self.animations:
            logger.debug("Animation loop idle")

    def step(self, owner: Any) -> None:
        self.frame += 1
        for anim in list(self.animations):
            # skip animations a previous callback stopped during this frame
            if anim not in self.animations:
                continue
            anim.frame += 1
            if not anim.finished:
                anim.callback(owner, anim.frame, anim.duration)
        self.animations = [a for a in self.animations if not a.finished]
