"""
Frontend Frame Package

Read-only, immutable view objects computed from the engine for a
rendering shell. The shell draws; it never lays out or infers.
"""
