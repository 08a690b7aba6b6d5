"""Branch and release workflows.

Modules are imported directly (`gflow.flow.lifecycle`, `gflow.flow.orchestrator`)
since the git layer depends on `gflow.flow.errors`.
"""
