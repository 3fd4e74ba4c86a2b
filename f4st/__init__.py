"""F4ST scaffolder -- generates layered frontend project structures.

Materializes the F4ST architecture (``shared`` → ``core`` → ``modules``, plus
an optional ``routes`` layer) for a new React + TypeScript + Vite project,
enforcing the inter-layer dependency table and emitting a public ``index.ts``
barrel per module.
"""

__version__ = "0.1.0"
