"""
chunkgraph: bundle chunk and module dependency analysis.

Turns the per-chunk, per-module artifacts a bundler leaves behind into
static export facts and a concatenation-aware dependency graph.
"""

__version__ = "0.3.0"
