"""Top-level package for prme.

prme opens a pull request that reviews the entire content of a GitHub
repository by comparing two orphan branches.  Run ``prme --help`` for usage.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
