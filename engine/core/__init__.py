"""
Core engine module.

Exports:
- EventBus, Event: Event system
- Scheduler, Task, TaskState, WaitUntil: Step scheduler
- Action, NavigationAxis: Input actions
"""

from engine.core.events import EventBus, Event
from engine.core.scheduler import Scheduler, Task, TaskState, WaitUntil
from engine.core.actions import Action, NavigationAxis

__all__ = [
    "EventBus",
    "Event",
    "Scheduler",
    "Task",
    "TaskState",
    "WaitUntil",
    "Action",
    "NavigationAxis",
]
