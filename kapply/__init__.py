"""kapply: inventory pruning and generated-resource status for declarative apply."""

__version__ = "0.3.0"
