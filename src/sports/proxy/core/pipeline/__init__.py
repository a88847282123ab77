from sports.proxy.core.pipeline.enrichment import (
    REQUIREMENTS,
    Requirement,
    enrich,
    missing_requirements,
)
from sports.proxy.core.pipeline.pipeline import OrchestrationPipeline
from sports.proxy.core.pipeline.state import (
    ApprovalOutcome,
    ResolutionTable,
    ResolvedEntity,
    resolved_entity,
)

__all__ = [
    "REQUIREMENTS",
    "Requirement",
    "enrich",
    "missing_requirements",
    "OrchestrationPipeline",
    "ApprovalOutcome",
    "ResolutionTable",
    "ResolvedEntity",
    "resolved_entity",
]
