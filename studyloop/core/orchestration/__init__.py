"""
Batch fan-out of generation runs and run status tracking.
"""

from studyloop.core.orchestration.dispatchers import (
    CeleryGenerationDispatcher,
    GenerationDispatcher,
    InProcessGenerationDispatcher,
)
from studyloop.core.orchestration.feature_tracker import FeatureRunTracker, run_feature
from studyloop.core.orchestration.orchestrator import (
    ORCHESTRATION_EVENT,
    JobOrchestrator,
    aggregate_feature_statuses,
    build_requests,
)

__all__ = [
    "CeleryGenerationDispatcher",
    "GenerationDispatcher",
    "InProcessGenerationDispatcher",
    "FeatureRunTracker",
    "run_feature",
    "ORCHESTRATION_EVENT",
    "JobOrchestrator",
    "aggregate_feature_statuses",
    "build_requests",
]
