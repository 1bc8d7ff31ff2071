"""Use cases composed by the runtime."""
