"""Showcase moderation service: content submissions, review workflow, usage statistics."""

__version__ = "0.1.0"
