"""gflow: git-flow branching with version bumps and changelogs."""

__version__ = "0.4.0"
