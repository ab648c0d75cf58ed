"""Tests for chunkwise."""
