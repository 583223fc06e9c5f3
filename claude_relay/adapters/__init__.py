"""Adapters — Discord, CLI executors and the status API."""
