# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cache-aware Swift Evolution proposal search for LaunchBar."""

from evolution.model import LaunchBarItem, Proposal
from evolution.resolver import Resolver

__all__ = ["LaunchBarItem", "Proposal", "Resolver"]
