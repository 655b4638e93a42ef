"""Tests for the lawyer matching engine."""
