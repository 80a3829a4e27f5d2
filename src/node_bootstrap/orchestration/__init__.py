"""Orchestration exports."""

from .bootstrap_contracts import BootstrapError, BootstrapOutcome, BootstrapPhase
from .node_bootstrap_use_case import run_node_bootstrap

__all__ = ["BootstrapError", "BootstrapOutcome", "BootstrapPhase", "run_node_bootstrap"]
