"""
Unit Tests for uci_client

Most session and process tests drive tests/fake_engine.py, a scripted UCI
engine run under the current interpreter; no real engine is needed.

Running Tests:
    # Run all tests
    pytest tests/

    # Run specific test file
    pytest tests/test_session.py

    # Run with coverage
    pytest tests/ --cov=uci_client --cov-report=html

    # Run specific test
    pytest tests/test_parser.py::TestInfoDecoding::test_mate_score

Dependencies:
    - pytest: Test framework
    - pytest-cov: Coverage reporting
"""
