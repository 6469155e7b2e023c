"""API layers and round-trip tests.

Tests the entry points together: parse(), loads()/dumps() round trips,
the formatter, and configuration validation.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest
import valvekv
from valvekv import KvConfig, LiteralParseError, KvSyntaxError


class Mode(enum.Enum):
    FAST = 1
    SAFE = 2


@dataclass
class Server:
    host: str
    port: int
    tls: bool


@dataclass
class Deployment:
    name: str
    replicas: int
    ratio: float
    mode: Mode
    servers: List[Server]
    labels: Dict[str, str]
    limits: Tuple[int, int]
    owner: Optional[str] = None
    backup: Optional[int] = None
    tags: List[str] = field(default_factory=list)


def sample_deployment():
    return Deployment(
        name="web",
        replicas=12,
        ratio=0.75,
        mode=Mode.SAFE,
        servers=[Server(f"host{i}", 8000 + i, i % 2 == 0) for i in range(11)],
        labels={"tier": "frontend", "team": "core"},
        limits=(256, 1024),
        owner="ops",
        tags=["a", "b"],
    )


class TestRoundTrip:
    """decode(encode(v)) == v for structural values."""

    def test_struct_round_trip(self):
        """Test a struct covering every structural shape."""
        value = sample_deployment()
        assert valvekv.loads(valvekv.dumps(value), Deployment) == value

    def test_round_trip_more_than_ten_elements(self):
        """Test that sequences past index 9 keep their order."""
        value = sample_deployment()
        result = valvekv.loads(valvekv.dumps(value), Deployment)
        assert [s.host for s in result.servers] == [f"host{i}" for i in range(11)]

    def test_wrapped_fragment_embeds_under_key(self):
        """Test that a wrapped fragment is a valid section value."""
        fragment = valvekv.dumps(Server("h", 1, True), wrap_root=True)
        result = valvekv.loads(f'"server"\n{fragment}', Dict[str, Server])
        assert result == {"server": Server("h", 1, True)}

    def test_plain_dict_round_trip(self):
        """Test untyped nested dicts of strings."""
        value = {"a": "1", "b": {"c": "2", "d": {"e": ""}}}
        assert valvekv.loads(valvekv.dumps(value)) == value

    def test_list_round_trip(self):
        """Test a top-level sequence."""
        value = [[1, 2], [3], []]
        assert valvekv.loads(valvekv.dumps(value), List[List[int]]) == value

    def test_tree_round_trip(self):
        """Test parse -> tree_to_text -> parse."""
        text = '#base "x.kv"\n"a" "1"\n"a" "2"\n"s"\n{\n  "k" "v"\n}'
        parsed = valvekv.parse(text)
        assert valvekv.tree_to_text(parsed) == text
        assert valvekv.parse(valvekv.tree_to_text(parsed)) == parsed

    def test_file_round_trip(self, tmp_path):
        """Test dump() then load()."""
        path = tmp_path / "deploy.kv"
        value = sample_deployment()
        valvekv.dump(value, path)
        assert path.read_text(encoding="utf-8").endswith("}\n")
        assert valvekv.load(path, Deployment) == value


class TestSpecifiedBehaviour:
    """Behaviour pinned for compatibility."""

    def test_sequence_reconstruction_order(self):
        """Test that sequence order follows keys, not source order."""
        result = valvekv.loads('"a" { "1" "world" "0" "hello" }', Dict[str, List[str]])
        assert result == {"a": ["hello", "world"]}

    def test_boolean_literal_contract(self):
        """Test 1/0 and a rejected spelling."""
        assert valvekv.loads('"a" "1" "b" "0"', Dict[str, bool]) == {"a": True, "b": False}
        with pytest.raises(LiteralParseError):
            valvekv.loads('"a" "yes"', Dict[str, bool])

    def test_quote_boundary(self):
        """Test that an embedded quote fails instead of truncating."""
        with pytest.raises(KvSyntaxError):
            valvekv.loads('"a" "hel"lo"', Dict[str, str])

    def test_single_field_scenario(self):
        """Test the smallest struct document."""

        @dataclass
        class Doc:
            a: str

        assert valvekv.loads('"a" "hello"', Doc) == Doc(a="hello")


class TestFormatter:
    """Test the text-level indentation pass."""

    def test_reindent_flat_text(self):
        """Test indenting unindented text."""
        flat = '"a"\n{\n"b" "c"\n"d"\n{\n"e" "f"\n}\n}'
        expected = '"a"\n{\n  "b" "c"\n  "d"\n  {\n    "e" "f"\n  }\n}'
        assert valvekv.format_text(flat) == expected

    def test_idempotent(self):
        """Test that formatting formatted text changes nothing."""
        messy = '   "a"\n{\n        "b" "c"\n\n   "d"\n    {\n"e" "f"\n}\n       }'
        once = valvekv.format_text(messy)
        assert valvekv.format_text(once) == once

    def test_idempotent_on_encoder_output(self):
        """Test that dumps() output is already formatted."""
        text = valvekv.dumps(sample_deployment())
        assert valvekv.format_text(text) == text

    def test_multiline_string_untouched(self):
        """Test that continuation lines of a string keep their spacing."""
        text = '"s"\n{\n"t" "one\n   two }\n"\n}'
        assert valvekv.format_text(text) == '"s"\n{\n  "t" "one\n   two }\n"\n}'

    def test_custom_indent_unit(self):
        """Test a four-space indent."""
        assert valvekv.format_text('"a"\n{\n"b" "c"\n}', "    ") == '"a"\n{\n    "b" "c"\n}'

    def test_unbalanced_close_does_not_go_negative(self):
        """Test stray closing braces."""
        assert valvekv.format_text('}\n"a" "b"') == '}\n"a" "b"'

    def test_trim_root(self):
        """Test stripping the outermost brace pair."""
        assert valvekv.trim_root('{\n  "a" "b"\n}') == '"a" "b"'

    def test_trim_root_noop(self):
        """Test text without a root brace pair."""
        assert valvekv.trim_root('"a" "b"') == '"a" "b"'
        assert valvekv.trim_root('"a"\n{\n}') == '"a"\n{\n}'


class TestConfig:
    """Test KvConfig validation."""

    def test_defaults(self):
        """Test default values."""
        config = KvConfig()
        assert config.indent == "  "
        assert config.wrap_root is False
        assert config.sequence_order == "numeric"
        assert config.max_depth == 100
        assert config.base_marker == "#base"

    @pytest.mark.parametrize("kwargs", [
        {"indent": "x"},
        {"sequence_order": "random"},
        {"max_depth": 0},
        {"base_marker": ""},
        {"base_marker": "base"},
        {"base_marker": "#ba se"},
    ])
    def test_invalid(self, kwargs):
        """Test rejected settings."""
        with pytest.raises(ValueError):
            KvConfig(**kwargs)
