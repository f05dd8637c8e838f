"""
Tests for the Token Risk Engine.

This package contains tests for:
- Provider adapters and HTTP error mapping
- Normalizers and unit conversion
- Heuristic rules and the threshold table
- Engine fan-out, partial failure and determinism
- Configuration loading
"""
