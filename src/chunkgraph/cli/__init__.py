"""Command line interface for chunkgraph."""
