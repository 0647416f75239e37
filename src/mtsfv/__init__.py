"""MTSFV - multi-threaded CRC32 file verifier."""

__version__ = "0.1.0"
