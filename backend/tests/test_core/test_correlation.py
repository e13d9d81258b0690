"""Tests for correlation ID generation, context and header handling."""

import re

import pytest

from core.correlation import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id"""

    def test_short_lowercase_hex(self) -> None:
        for _ in range(50):
            assert re.fullmatch(r"[0-9a-f]{8}", generate_correlation_id())

    def test_ids_do_not_repeat(self) -> None:
        ids = {generate_correlation_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestCorrelationContext:
    """Tests for the context variable helpers."""

    def test_empty_outside_a_request(self) -> None:
        correlation_id_var.set("")
        assert get_correlation_id() == ""

    def test_set_then_get(self) -> None:
        set_correlation_id("req00001")
        assert get_correlation_id() == "req00001"

        set_correlation_id("req00002")
        assert get_correlation_id() == "req00002"


class TestResolveCorrelationId:
    """Tests for picking the ID of an incoming request."""

    def test_reuses_client_value(self) -> None:
        assert resolve_correlation_id("mobile-app-42") == "mobile-app-42"

    @pytest.mark.parametrize("incoming", [None, "", "x" * 65, "bad\nvalue"])
    def test_generates_for_missing_or_unsafe_values(self, incoming) -> None:
        resolved = resolve_correlation_id(incoming)

        assert resolved != incoming
        assert re.fullmatch(r"[0-9a-f]{8}", resolved)
