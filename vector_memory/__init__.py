"""
Pluggable vector memory store for agents.
Embeddings tagged with agent/namespace/source, ranked by cosine similarity.
"""

VERSION = "1.0.0"
