"""fastify-starter scaffolder -- materialises and customises the monorepo template.

Quick usage::

    from fastify_starter.config import ProjectOptions
    from fastify_starter.scaffolder import customize, materialize

    materialize(template_dir, "/tmp/demo-app")
    customize("/tmp/demo-app", "demo-app", ProjectOptions(database="postgres"))
"""

from fastify_starter.scaffolder.customizer import (
    CustomizationResult,
    TemplateCustomizer,
    customize,
)
from fastify_starter.scaffolder.materializer import ensure_data_placeholder, materialize
from fastify_starter.scaffolder.patterns import DEFAULT_EXCLUDE_PATTERNS, PatternMatcher
from fastify_starter.scaffolder.templates import TemplateRenderer

__all__ = [
    "CustomizationResult",
    "DEFAULT_EXCLUDE_PATTERNS",
    "PatternMatcher",
    "TemplateCustomizer",
    "TemplateRenderer",
    "customize",
    "ensure_data_placeholder",
    "materialize",
]
