"""Structural summaries of TypeScript codebases: repo maps, skeletons, dependencies."""

__version__ = "0.1.0"

from .orchestrator import Orchestrator, PathOutsideRootError

__all__ = ["Orchestrator", "PathOutsideRootError", "__version__"]
