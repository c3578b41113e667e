"""Core functionality for Playback Scrobbler.

Import from the submodules directly; sources and sinks depend on
``core.normalizer`` and the engine depends on them.
"""
