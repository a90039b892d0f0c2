"""fastify-starter -- generates Fastify + React Router monorepos.

Quick usage::

    import asyncio
    from fastify_starter.pipeline import Pipeline

    report = asyncio.run(Pipeline("my-app", {"database": "postgres"}).run())
"""

__version__ = "0.1.0"
