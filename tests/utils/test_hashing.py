from __future__ import annotations

from src.utils._hashing import cache_key, content_hash, normalize_query


class TestContentHash:
    def test_string_input(self):
        result = content_hash("hello")
        assert isinstance(result, str)
        assert len(result) == 64  # SHA-256 hex digest

    def test_string_and_bytes_match(self):
        assert content_hash("hello") == content_hash(b"hello")

    def test_known_sha256(self):
        expected = "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"
        assert content_hash("hello") == expected


class TestNormalizeQuery:
    def test_trims_and_lowercases(self):
        assert normalize_query("  Hello World  ") == "hello world"

    def test_collapses_internal_whitespace(self):
        assert normalize_query("what\tis   rrf\n") == "what is rrf"

    def test_casefold_handles_special_letters(self):
        assert normalize_query("STRASSE") == normalize_query("straße")

    def test_idempotent(self):
        once = normalize_query("  Mixed CASE  query ")
        assert normalize_query(once) == once

    def test_empty_and_whitespace(self):
        assert normalize_query("") == ""
        assert normalize_query("   \n ") == ""


class TestCacheKey:
    def test_variants_share_a_key(self):
        assert cache_key(" Hello ") == cache_key("hello") == cache_key("HELLO")

    def test_key_is_hash_of_normalized_text(self):
        assert cache_key("  HELLO ") == content_hash("hello")

    def test_key_is_64_hex_chars(self):
        key = cache_key("anything")
        assert len(key) == 64
        assert all(c in "0123456789abcdef" for c in key)

    def test_different_queries_differ(self):
        assert cache_key("vector search") != cache_key("keyword search")
