"""
Test suite for Topic Clustering.

This package contains all tests organized by component:
- test_algorithms/: Tests for distances, metrics, clustering strategies,
  dimensionality reduction and tuning
- test_config.py: Tests for configuration and logging setup
- test_cli.py: Tests for the command line entry point
"""
