"""Subscription exports."""

from .descriptor_builder import build_descriptor_lines, render_subscription
from .subscription_app import SubscriptionService, create_app, serve

__all__ = [
    "SubscriptionService",
    "build_descriptor_lines",
    "create_app",
    "render_subscription",
    "serve",
]
