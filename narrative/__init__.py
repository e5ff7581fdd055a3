"""
Narrative framework.

Provides game-facing systems built on top of the engine:
- Dialog (branching conversations, narration, localization)
- State (story tags, items, inventory)
"""
