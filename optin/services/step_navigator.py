"""
Step Navigator

Tracks which section of a popup is on screen. The step always stays inside
[0, total_steps); requests that would leave that range are ignored.
"""

import logging
from dataclasses import dataclass, asdict
from typing import Callable, List, Optional

analytics_logger = logging.getLogger('optin.analytics')


@dataclass
class NavigationEvent:
    """A step change reported to analytics."""
    action: str  # next, previous
    from_step: int
    to_step: int
    section_id: Optional[object] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        return {
            'action': data['action'],
            'fromStep': data['from_step'],
            'toStep': data['to_step'],
            'sectionId': data['section_id'],
        }


def log_navigation_event(event: NavigationEvent) -> None:
    """Default analytics sink."""
    analytics_logger.info(
        f"Popup step {event.action}: {event.from_step} -> {event.to_step}",
        extra={'navigation': event.to_dict()},
    )


class StepNavigator:
    """
    Forward/back/jump navigation over a popup's sections.

    Usage:
        nav = StepNavigator([s['id'] for s in draft['sections']])
        nav.next()
        nav.step  # 1
    """

    def __init__(self, section_ids: List, on_navigate: Callable[[NavigationEvent], None] = None):
        self.section_ids = list(section_ids)
        self.on_navigate = on_navigate or log_navigation_event
        self._step = 0

    @property
    def step(self) -> int:
        return self._step

    @property
    def total_steps(self) -> int:
        return len(self.section_ids)

    @property
    def is_first(self) -> bool:
        return self._step == 0

    @property
    def is_last(self) -> bool:
        return self._step >= self.total_steps - 1

    def _emit(self, action: str, from_step: int, to_step: int) -> None:
        section_id = self.section_ids[from_step] if from_step < self.total_steps else None
        self.on_navigate(NavigationEvent(action, from_step, to_step, section_id))

    def next(self) -> bool:
        """Advance one step. Returns False (no-op) on the last step."""
        if self._step >= self.total_steps - 1:
            return False
        from_step = self._step
        self._step += 1
        self._emit('next', from_step, self._step)
        return True

    def previous(self) -> bool:
        """Go back one step. Returns False (no-op) on the first step."""
        if self._step <= 0:
            return False
        from_step = self._step
        self._step -= 1
        self._emit('previous', from_step, self._step)
        return True

    def go_to(self, step) -> bool:
        """Jump to ``step``; out-of-range or non-integer requests are ignored."""
        if isinstance(step, bool) or not isinstance(step, int):
            return False
        if 0 <= step < self.total_steps:
            self._step = step
            return True
        return False

    def reset(self) -> None:
        self._step = 0

    def open(self) -> None:
        """Popup became visible again; every showing starts at the first step."""
        self.reset()

    def sync(self, section_ids: List, is_multi_step: bool = True) -> None:
        """
        Follow a change to the popup's section list or multi-step flag.

        Resets to the first step when multi-step is off or when the list
        shrank below the current step.
        """
        self.section_ids = list(section_ids)
        if not is_multi_step or self._step >= self.total_steps:
            self.reset()
