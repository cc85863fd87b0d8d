"""
Pipeline Integration (In-Process Runtime Wiring)

Deterministic, testable, in-process runner that composes encoding,
hashing, tree construction, proof extraction and signature collection.

Public API:
- MigrationPipeline: Main pipeline runner class
- PipelineResult: Complete result of a pipeline run
- run_pipeline: One-call convenience wrapper
- build_leaves / build_tree: Individual stages
"""

from orchestrator.pipeline import (
    MigrationPipeline,
    PipelineResult,
    build_leaves,
    build_tree,
    parse_recipient,
    run_pipeline,
)


__all__ = [
    "MigrationPipeline",
    "PipelineResult",
    "run_pipeline",
    "build_leaves",
    "build_tree",
    "parse_recipient",
]
