"""
irbridge: a staged toy compiler pipeline.

source -> tokens -> AST -> IR -> optimized IR -> assembly (via llc)
"""

__version__ = "0.1.0"
