"""Snapshot lifecycle.

This module creates read-only boot snapshots and prunes old ones
according to the configured retention count.
"""
