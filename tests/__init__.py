"""
Unit Tests for the Magnus Move Engine

This package contains unit tests for all engine components.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_selection.py

    # Run with coverage
    pytest tests/ --cov=magnus_engine --cov-report=html

Dependencies:
    - pytest: Test framework
    - pytest-asyncio: Coroutine tests
    - pytest-cov: Coverage reporting
    - httpx: FastAPI TestClient transport
"""
