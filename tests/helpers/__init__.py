"""Test helper utilities for GhostScore sync tests."""

from .fake_nocodb import FakeNocoDBSession, FakeResponse, load_fixture_tables

__all__ = ["FakeNocoDBSession", "FakeResponse", "load_fixture_tables"]
