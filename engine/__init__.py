"""
Engine layer for the narrative dialog runtime.

Provides the pieces a dialog needs from its host game:
- EventBus, Event: typed publish/subscribe
- Scheduler, Task, WaitUntil: cooperative step scheduling driven by update(dt)
- InputHandler, Action, NavigationAxis: semantic input polled once per step
"""

__version__ = "0.1.0"

from engine.core import (
    EventBus,
    Event,
    Scheduler,
    Task,
    TaskState,
    WaitUntil,
    Action,
    NavigationAxis,
)
from engine.input import InputHandler

__all__ = [
    # Events
    "EventBus",
    "Event",
    # Scheduling
    "Scheduler",
    "Task",
    "TaskState",
    "WaitUntil",
    # Input
    "InputHandler",
    "Action",
    "NavigationAxis",
]
