"""
coursereader - offline course reader sync engine.

Mirrors an authored, versioned course catalog into a local SQLite store
while keeping the learner's progress and notes intact.

Usage:
    # CLI
    coursereader sync

    # Programmatic
    from coursereader.application.container import Container

    container = Container()
    report = container.sync_engine.sync()
"""

__version__ = "0.1.0"
__author__ = "coursereader Team"

__all__ = ["__version__"]
