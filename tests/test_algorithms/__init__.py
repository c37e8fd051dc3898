"""Tests for the algorithm core library."""
