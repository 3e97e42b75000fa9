"""benchdiff -- compare BenchmarkDotNet results between two versions of a codebase."""

__version__ = "0.1.0"
