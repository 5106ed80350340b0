"""Tests - Test suite and test infrastructure."""
