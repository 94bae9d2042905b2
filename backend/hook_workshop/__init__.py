"""Hook Workshop — clarify a story idea, run a hook tournament, lock a hook pack."""

__version__ = "0.1.0"
