"""coreview: narrated walkthroughs of unified diffs."""

__version__ = "0.1.0"
