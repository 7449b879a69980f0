"""Usage tree engine: parse signatures, filter, build the trie, flatten it."""

from .builder import TreeNode, TreeStats, add_path, build_tree, new_root, tree_stats
from .compressor import DEFAULT_CHUNK_SIZE, chunked, flatten_tree
from .filtering import PathPattern, compile_patterns, filter_records
from .signature import classify, join_signature, parse_record, split_signature

__all__ = [
    "TreeNode",
    "TreeStats",
    "add_path",
    "build_tree",
    "new_root",
    "tree_stats",
    "DEFAULT_CHUNK_SIZE",
    "chunked",
    "flatten_tree",
    "PathPattern",
    "compile_patterns",
    "filter_records",
    "classify",
    "join_signature",
    "parse_record",
    "split_signature",
]
