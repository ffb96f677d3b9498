"""
Test suite for the SeersLeague ledger reader.

This package contains unit tests and fixtures for the reader components.
Ledger and MongoDB collaborators are replaced by in-memory fakes.

Test Structure:
    - conftest.py: Shared fixtures, fakes and factories
    - test_models.py: Tests for Pydantic models and validators
    - test_chain.py: Tests for log decoding and the web3 adapter
    - test_stats_service.py: Tests for the reconciled stats reader
    - test_*_service.py: Tests for the remaining services

Running Tests:
    pytest                              # Run all tests
    pytest -v                           # Verbose output
    pytest --cov=seersleague            # With coverage
    pytest tests/test_stats_service.py  # Run specific test file
"""

import pytest

# Mark all tests in this package as asyncio tests by default
pytestmark = pytest.mark.asyncio
