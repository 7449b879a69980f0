"""Tests for signature splitting and node classification."""

import pytest

from usage_tree.exceptions import InvalidSignatureFormat
from usage_tree.models import InvocationRecord, NodeType
from usage_tree.tree.signature import (
    classify,
    join_signature,
    parse_record,
    split_signature,
)


class TestSplitSignature:
    def test_method_keeps_arguments_on_last_segment(self):
        assert split_signature("a.b.c.d(e, f)") == ["a", "b", "c", "d(e, f)"]

    def test_constructor_duplicates_class_name(self):
        assert split_signature("a.b.C(e, f)", is_constructor=True) == ["a", "b", "C", "C(e, f)"]

    def test_nested_class_delimiter(self):
        assert split_signature("a.b.Outer$Inner.run()") == ["a", "b", "Outer", "Inner", "run()"]

    def test_consecutive_delimiters_are_dropped(self):
        assert split_signature("a..b.$C.m()") == ["a", "b", "C", "m()"]

    def test_only_first_paren_splits(self):
        segments = split_signature("a.B.m(java.util.List(x))")
        assert segments == ["a", "B", "m(java.util.List(x))"]

    def test_truncated_signature_gets_closing_paren(self):
        assert split_signature("a.B.m(java.lang.Str") == ["a", "B", "m(java.lang.Str)"]

    def test_empty_parameter_tail(self):
        assert split_signature("a.B.m(") == ["a", "B", "m()"]

    def test_missing_paren_is_format_error(self):
        with pytest.raises(InvalidSignatureFormat) as exc:
            split_signature("a.b.C.method")
        assert exc.value.signature == "a.b.C.method"
        assert "(" in exc.value.reason

    def test_no_name_is_format_error(self):
        with pytest.raises(InvalidSignatureFormat):
            split_signature("..(int)")

    def test_custom_delimiters(self):
        assert split_signature("a/b/C.m()", delimiters=("/",)) == ["a", "b", "C.m()"]


class TestParseRecord:
    def test_uses_constructor_flag(self):
        record = InvocationRecord("a.b.C(int)", "<init>", 0)
        assert parse_record(record) == ["a", "b", "C", "C(int)"]

    def test_regular_method(self):
        record = InvocationRecord("a.b.C.run(int)", "run", 0)
        assert parse_record(record) == ["a", "b", "C", "run(int)"]

    def test_custom_constructor_name(self):
        record = InvocationRecord("a.b.C()", "ctor", 0)
        assert parse_record(record, constructor_name="ctor") == ["a", "b", "C", "C()"]


class TestClassify:
    def test_lowercase_under_root_is_package(self):
        assert classify(NodeType.ROOT, "com") == NodeType.PACKAGE

    def test_uppercase_is_class(self):
        assert classify(NodeType.PACKAGE, "Bar") == NodeType.CLASS

    def test_call_under_class_is_method(self):
        assert classify(NodeType.CLASS, "baz()") == NodeType.METHOD

    def test_constructor_call_under_class_is_method(self):
        assert classify(NodeType.CLASS, "C(int)") == NodeType.METHOD

    def test_anything_under_class_without_call_is_nested_class(self):
        assert classify(NodeType.CLASS, "inner") == NodeType.CLASS
        assert classify(NodeType.CLASS, "1") == NodeType.CLASS

    def test_call_suffix_ignored_for_case_check(self):
        assert classify(NodeType.PACKAGE, "Foo(int)") == NodeType.CLASS
        assert classify(NodeType.PACKAGE, "foo(java.lang.String)") == NodeType.PACKAGE

    def test_lowercase_class_name_is_misclassified_as_package(self):
        # Known limitation: classification follows naming conventions only.
        assert classify(NodeType.PACKAGE, "myclass") == NodeType.PACKAGE


class TestJoinSignature:
    def test_top_level_has_no_delimiter(self):
        assert join_signature("", NodeType.ROOT, "com") == "com"

    def test_package_child_uses_dot(self):
        assert join_signature("com.foo", NodeType.PACKAGE, "Bar") == "com.foo.Bar"

    def test_nested_class_uses_dollar(self):
        assert join_signature("com.Outer", NodeType.CLASS, "Inner") == "com.Outer$Inner"

    def test_method_uses_dot(self):
        assert join_signature("com.Outer", NodeType.CLASS, "run()") == "com.Outer.run()"

    def test_constructor_call_attaches_arguments_to_class(self):
        assert join_signature("a.b.C", NodeType.CLASS, "C(int)", constructor=True) == "a.b.C(int)"

    def test_method_named_like_its_class_is_not_a_constructor(self):
        assert join_signature("a.b.C", NodeType.CLASS, "C(int)") == "a.b.C.C(int)"
