"""
Integration tests for otelkafka.

These tests connect instrumented producers to instrumented consumers
through the in-memory client doubles and check that one trace spans the
whole message path.

Skip integration tests:
    pytest tests/ -v -m "not integration"
"""
