"""Insight kinds, data stores, procedural paths, and the pass pipeline."""
