"""mgf: git-flow branching workflow for Maven projects."""

__version__ = "0.1.0"
