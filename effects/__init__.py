"""Effect passes. Each module registers its passes with ``effects_core.effect``."""
