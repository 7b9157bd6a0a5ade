import ast

from apigen.parser.scanner import iter_fields, scan_handlers, scan_types


def _parse(source: str) -> ast.Module:
    return ast.parse(source)


class TestScanHandlers:
    def test_fixture_handlers(self, handlers_source):
        found = [(receiver, node.name) for receiver, node in scan_handlers(_parse(handlers_source))]
        assert found == [
            ("MyApi", "profile"),
            ("MyApi", "create"),
            ("MyApi", "info"),
            ("OtherApi", "ping"),
            ("OtherApi", "create"),
            ("LegacyApi", "status"),
            ("LegacyApi", "status_v1"),
            ("LegacyApi", "gone"),
        ]

    def test_skips_methods_without_marker(self):
        tree = _parse(
            "class Api:\n"
            "    def a(self, ctx, p: P):\n"
            '        """Just docs."""\n'
            "    def b(self, ctx, p: P):\n"
            "        pass\n"
        )
        assert list(scan_handlers(tree)) == []

    def test_skips_functions_without_receiver(self):
        tree = _parse('def f(ctx, p: P):\n    """apigen:api {"url": "/f"}"""\n')
        assert list(scan_handlers(tree)) == []

    def test_marker_must_lead_the_docstring(self):
        tree = _parse(
            "class Api:\n"
            "    def a(self, ctx, p: P):\n"
            '        """Handler.\n\n        apigen:api {"url": "/a"}\n        """\n'
        )
        assert list(scan_handlers(tree)) == []

    def test_is_lazy(self):
        assert not isinstance(scan_handlers(_parse("")), list)


class TestScanTypes:
    def test_fixture_types(self, handlers_source):
        names = [node.name for node in scan_types(_parse(handlers_source))]
        assert names == [
            "User", "ProfileParams", "CreateParams", "PingParams", "OtherCreateParams", "Unused", "NoParams",
        ]

    def test_annotated_plain_class_is_aggregate(self):
        tree = _parse("class P:\n    login: str\n")
        assert [n.name for n in scan_types(tree)] == ["P"]

    def test_class_with_only_methods_is_not_aggregate(self):
        tree = _parse("class Api:\n    x = 1\n    def f(self):\n        pass\n")
        assert list(scan_types(tree)) == []

    def test_empty_plain_class_is_aggregate(self):
        tree = _parse("class NoParams:\n    pass\n\nclass Docs:\n    \"\"\"No fields.\"\"\"\n")
        assert [n.name for n in scan_types(tree)] == ["NoParams", "Docs"]

    def test_empty_dataclass_is_aggregate(self):
        tree = _parse("import dataclasses\n\n@dataclasses.dataclass(frozen=False)\nclass P:\n    pass\n")
        assert [n.name for n in scan_types(tree)] == ["P"]


class TestIterFields:
    def test_skips_classvars_and_plain_assignments(self):
        tree = _parse(
            "class P:\n"
            "    kind: ClassVar[str] = 'x'\n"
            "    other: typing.ClassVar = 1\n"
            "    plain = 3\n"
            "    login: str\n"
            "    age: int = 0\n"
        )
        fields = [item.target.id for item in iter_fields(tree.body[0])]
        assert fields == ["login", "age"]
