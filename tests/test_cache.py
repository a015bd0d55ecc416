"""Tests for the schema cache, including concurrent use."""

from __future__ import annotations

import threading
from pathlib import Path
from unittest.mock import MagicMock

from schemakit.cache import SchemaCache
from schemakit.compiler import SchemaCompiler
from schemakit.fetch import SchemaFetcher
from schemakit.messages import ErrorMessage
from schemakit.nodes import ObjectSchema, SimpleTypeSchema
from schemakit.simple_types import SimpleType


class TestSchemaCache:
    """Tests for registration and lookup."""

    def test_register_then_get(self) -> None:
        cache = SchemaCache()
        node = SimpleTypeSchema(type=SimpleType.STRING)

        assert cache.register_schema("http://example.com/a.json", node) is node

        assert cache.get_schema("http://example.com/a.json") is node
        assert cache.has_schema("http://example.com/a.json")
        assert "http://example.com/a.json" in cache
        assert len(cache) == 1

    def test_first_registration_wins(self) -> None:
        cache = SchemaCache()
        first = SimpleTypeSchema(type=SimpleType.STRING)
        second = ObjectSchema()

        cache.register_schema("http://example.com/a.json", first)
        result = cache.register_schema("http://example.com/a.json", second)

        assert result is first
        assert cache.get_schema("http://example.com/a.json") is first

    def test_locations_are_normalized(self, tmp_path: Path) -> None:
        cache = SchemaCache()
        node = SimpleTypeSchema()
        cache.register_schema(tmp_path / "a.json", node)

        assert cache.has_schema((tmp_path / "a.json").resolve().as_uri())

    def test_scheme_case_and_empty_fragment_share_an_entry(self) -> None:
        cache = SchemaCache()
        node = SimpleTypeSchema()
        cache.register_schema("HTTP://example.com/x.json#", node)

        assert cache.get_schema("http://example.com/x.json") is node
        assert cache.locations() == ["http://example.com/x.json"]

    def test_contains_rejects_other_types(self) -> None:
        assert 42 not in SchemaCache()

    def test_miss_compiles_with_fresh_compiler(self, write_schema) -> None:
        created: list[SchemaCompiler] = []

        def factory(cache: SchemaCache) -> SchemaCompiler:
            compiler = SchemaCompiler(cache, cache.fetcher)
            created.append(compiler)
            return compiler

        location = write_schema("s.json", {"type": "string"})
        cache = SchemaCache(compiler_factory=factory)

        first = cache.get_schema(location)
        second = cache.get_schema(location)

        assert first is second
        assert len(created) == 1

    def test_miss_uses_factory(self) -> None:
        compiler = MagicMock(spec=SchemaCompiler)
        compiler.compile.return_value = SimpleTypeSchema()
        cache = SchemaCache(compiler_factory=lambda c: compiler)

        assert cache.get_schema("http://example.com/a.json") == SimpleTypeSchema()
        compiler.compile.assert_called_once_with("http://example.com/a.json")

    def test_close_closes_fetcher(self) -> None:
        fetcher = MagicMock(spec=SchemaFetcher)
        SchemaCache(fetcher).close()
        fetcher.close.assert_called_once_with()


class TestConcurrency:
    """Concurrent compilation must hand every caller the same node."""

    def test_concurrent_get_schema_returns_one_node(self, write_schema) -> None:
        write_schema(
            "child.json", {"type": "object", "properties": {"p": {"$ref": "parent.json"}}}
        )
        parent = write_schema(
            "parent.json",
            {
                "type": "object",
                "properties": {"c": {"$ref": "child.json"}, "n": {"type": "integer"}},
            },
        )
        cache = SchemaCache()
        barrier = threading.Barrier(10)
        results = []
        errors = []
        lock = threading.Lock()

        def compile_schema() -> None:
            try:
                barrier.wait()
                schema = cache.get_schema(parent)
                with lock:
                    results.append(schema)
            except Exception as e:
                with lock:
                    errors.append(e)

        threads = [threading.Thread(target=compile_schema) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(results) == 10
        assert all(r is results[0] for r in results)
        assert len(cache) == 2

        # The winning graph is self-consistent
        assert results[0].validate({"c": {"p": {"n": "x"}}}) == [
            ErrorMessage("c.p.n", "Invalid type: must be of type integer")
        ]

    def test_concurrent_validation_of_shared_schema(self, write_schema) -> None:
        location = write_schema(
            "list.json", {"type": "array", "items": {"type": "integer", "minimum": 0}}
        )
        schema = SchemaCache().get_schema(location)
        outcomes: list[list[ErrorMessage]] = []
        lock = threading.Lock()

        def validate(index: int) -> None:
            errors = schema.validate([index, -index - 1])
            with lock:
                outcomes.append(errors)

        threads = [threading.Thread(target=validate, args=(i,)) for i in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(outcomes) == 20
        assert all(len(errors) == 1 and errors[0].location == "[1]" for errors in outcomes)
