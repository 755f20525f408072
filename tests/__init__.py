"""
Tests Package - Unit tests for the task export pipeline.

Test structure:
- tests/conftest.py - shared fixtures (settings, mocked task API)
- tests/fakes.py - in-memory task API and sheet sink
"""
