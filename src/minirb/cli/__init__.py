"""
minirb Command-Line Tools
=========================

- **minirb**: run a source file, optionally dumping tokens, AST,
  bytecode or an execution trace
"""

__all__ = ["minirb"]
