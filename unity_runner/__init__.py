"""Unity Runner — locate Unity editors and run them in batch mode on CI agents."""

__version__ = "0.1.0"
