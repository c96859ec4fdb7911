"""Admin moderation rules."""

from showcase.moderation.state_machine import ModerationStateMachine


__all__ = ["ModerationStateMachine"]
