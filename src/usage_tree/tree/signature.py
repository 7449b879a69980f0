"""Split invocation signatures into hierarchical path segments.

    "a.b.c.d(e, f)"                  -> ["a", "b", "c", "d(e, f)"]
    "a.b.C(e, f)"  (constructor)     -> ["a", "b", "C", "C(e, f)"]
    "a.b.Outer$Inner.run()"          -> ["a", "b", "Outer", "Inner", "run()"]

Node types are guessed from Java naming conventions: an upper-case first
letter means a class, anything below a class is a nested class or a method.
Code that ignores the convention (lower-case class names) is classified as a
package; that is accepted, not corrected.
"""

from __future__ import annotations

import re
from typing import Sequence

from ..exceptions import InvalidSignatureFormat
from ..models import CONSTRUCTOR_METHOD_NAME, InvocationRecord, NodeType

DEFAULT_DELIMITERS: tuple[str, ...] = (".", "$")

CALL_MARKER = "("


def _splitter(delimiters: Sequence[str]) -> re.Pattern:
    return re.compile("|".join(re.escape(d) for d in delimiters))


def split_signature(
    signature: str,
    is_constructor: bool = False,
    delimiters: Sequence[str] = DEFAULT_DELIMITERS,
) -> list[str]:
    """Return the ordered path segments for one raw signature.

    The parameter list stays attached to the last segment. Constructors get
    their class name twice so the class node and the constructor call node
    are distinct.

    Raises:
        InvalidSignatureFormat: no parameter list, or nothing before it.
    """
    name, marker, arguments = signature.partition(CALL_MARKER)
    if not marker:
        raise InvalidSignatureFormat(signature, "missing '(' parameter list")

    elements = [e for e in _splitter(delimiters).split(name) if e]
    if not elements:
        raise InvalidSignatureFormat(signature, "no name before the parameter list")

    if is_constructor:
        elements.append(elements[-1])

    # Agents truncate very long signatures, which can cut off the ')'.
    closing = "" if arguments.endswith(")") else ")"
    elements[-1] = f"{elements[-1]}{CALL_MARKER}{arguments}{closing}"
    return elements


def parse_record(
    record: InvocationRecord,
    delimiters: Sequence[str] = DEFAULT_DELIMITERS,
    constructor_name: str = CONSTRUCTOR_METHOD_NAME,
) -> list[str]:
    """Split a record's signature, honouring its constructor flag."""
    return split_signature(
        record.signature,
        is_constructor=record.method_name == constructor_name,
        delimiters=delimiters,
    )


def is_call(segment: str) -> bool:
    return CALL_MARKER in segment


def classify(parent_type: NodeType, segment: str) -> NodeType:
    """Guess the node type of ``segment`` created below a ``parent_type`` node."""
    parent_is_class = parent_type == NodeType.CLASS
    if parent_is_class and is_call(segment):
        return NodeType.METHOD

    bare = segment.split(CALL_MARKER, 1)[0]
    first = bare[:1]
    # Characters without case ('_', digits) count as upper-case.
    if (first and first.upper() == first) or parent_is_class:
        return NodeType.CLASS
    return NodeType.PACKAGE


def join_signature(
    parent_signature: str, parent_type: NodeType, segment: str, constructor: bool = False
) -> str:
    """Build a child's full signature: '$' for nested classes, '.' otherwise.

    A constructor call hangs its parameter list straight off the class
    signature: ``a.b.C`` + ``C(int)`` -> ``a.b.C(int)``.
    """
    if not parent_signature:
        return segment
    if constructor:
        return parent_signature + segment[segment.index(CALL_MARKER):]
    delimiter = "$" if parent_type == NodeType.CLASS and not is_call(segment) else "."
    return f"{parent_signature}{delimiter}{segment}"
