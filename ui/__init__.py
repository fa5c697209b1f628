"""Terminal rendering with rich."""

from .rich_view import RichView, describe_event, render_scores, render_state

__all__ = ['RichView', 'describe_event', 'render_scores', 'render_state']
