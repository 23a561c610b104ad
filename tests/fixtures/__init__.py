"""Test fixtures package for tvm-client.

Usage:
    from tests.fixtures.tvm import FUTURE, PAST, make_http_response, set_http_responses
"""
