"""Tests for the process migrator."""
