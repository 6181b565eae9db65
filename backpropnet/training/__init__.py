"""Training loops, losses, metrics and pipeline assembly."""
