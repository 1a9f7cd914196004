"""
Test suite for the order pricing engine.

Run all tests: pytest
Run unit tests only: pytest tests/unit/
Run specific file: pytest tests/unit/test_totals_service.py -v
"""
