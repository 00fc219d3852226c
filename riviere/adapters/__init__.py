"""Adapters for external toolchains."""
