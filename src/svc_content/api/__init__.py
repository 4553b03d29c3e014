from .app import build_environment, build_pipeline, create_app
from .context import Environment, RequestContext
from .pipeline import Pipeline, PipelineConfig
from .router import Router

__all__ = [
    "create_app",
    "build_environment",
    "build_pipeline",
    "Environment",
    "RequestContext",
    "Pipeline",
    "PipelineConfig",
    "Router",
]
