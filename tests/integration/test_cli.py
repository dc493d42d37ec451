"""
Integration tests for CLI.
"""

import io
import json

import pytest

from mindmark.cli import load_graph, main, parse_args, parse_size, read_input
from mindmark.dom import LayoutType, Size

OUTLINE = "# Title\n- item one\n  - item two\n"


@pytest.fixture
def outline_file(tmp_path):
    path = tmp_path / "notes.md"
    path.write_text(OUTLINE)
    return path


class TestParseArgs:
    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])

    def test_parse_file(self):
        args = parse_args(["parse", "notes.md"])
        assert args.command == "parse"
        assert args.file == "notes.md"
        assert args.verbose is False

    def test_stdin_when_no_file(self):
        assert parse_args(["serialize"]).file is None

    def test_layout_flags(self):
        args = parse_args(["-v", "layout", "notes.md", "-l", "horizontal", "-n", "120x40"])
        assert args.verbose is True
        assert args.layout == "horizontal"
        assert args.node_size == "120x40"

    def test_layout_choices(self):
        with pytest.raises(SystemExit):
            parse_args(["layout", "--layout", "spiral"])

    def test_style(self):
        args = parse_args(["style", "color-blue h2", "--tokens", "extra.json"])
        assert args.style == "color-blue h2"
        assert args.tokens == "extra.json"


class TestParseSize:
    def test_valid(self):
        assert parse_size("120x40") == Size(120, 40)

    def test_uppercase_separator(self):
        assert parse_size("80X20") == Size(80, 20)

    @pytest.mark.parametrize("text", ["120", "axb", "120x40x2", ""])
    def test_bad_format(self, text):
        with pytest.raises(ValueError, match="Invalid size format"):
            parse_size(text)

    def test_non_positive(self):
        with pytest.raises(ValueError, match="Width must be > 0"):
            parse_size("0x40")


class TestReadInput:
    def test_file(self, outline_file):
        assert read_input(str(outline_file)) == OUTLINE

    def test_stdin(self, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("from stdin"))
        assert read_input(None) == "from stdin"


class TestLoadGraph:
    def test_markdown(self):
        graph = load_graph(OUTLINE)
        assert len(graph.nodes) == 3

    def test_json(self):
        graph = load_graph('{"layout": "horizontal", "nodes": [], "edges": []}')
        assert graph.layout is LayoutType.HORIZONTAL

    def test_bad_json(self):
        with pytest.raises(ValueError, match="Invalid graph JSON"):
            load_graph("{not json")


class TestMain:
    def test_parse(self, outline_file, capsys):
        assert main(["parse", str(outline_file)]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["layout"] == "radial"
        assert [n["type"] for n in data["nodes"]] == ["header", "text", "text"]
        assert len(data["edges"]) == 2

    def test_parse_error(self, tmp_path, capsys):
        path = tmp_path / "bad.md"
        path.write_text("# {.red}\n")
        assert main(["parse", str(path)]) == 1
        assert "token_extraction_error" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        missing = tmp_path / "nope.md"
        assert main(["parse", str(missing)]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_parse_then_serialize(self, outline_file, tmp_path, capsys):
        main(["parse", str(outline_file)])
        graph_file = tmp_path / "graph.json"
        graph_file.write_text(capsys.readouterr().out)

        assert main(["serialize", str(graph_file)]) == 0
        out = capsys.readouterr().out
        assert out == "<!-- mindmark-layout: radial -->\n\n# Title\n\n- item one\n  - item two\n"

    def test_serialize_invalid_graph(self, tmp_path, capsys):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({
            "nodes": [{"id": "a", "type": "header", "content": "A", "level": 1}],
            "edges": [{"id": "e", "sourceId": "a", "targetId": "ghost"}],
        }))
        assert main(["serialize", str(path)]) == 1
        assert "invalid_edge" in capsys.readouterr().err

    def test_serialize_unknown_node_type(self, tmp_path, capsys):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps({"nodes": [{"id": "a", "type": "sticker"}], "edges": []}))
        assert main(["serialize", str(path)]) == 1
        assert "Unknown node type" in capsys.readouterr().err

    def test_layout_with_node_size(self, outline_file, capsys):
        assert main(["layout", str(outline_file), "--node-size", "120x40"]) == 0
        data = json.loads(capsys.readouterr().out)
        root = data["nodes"][0]
        assert root["position"] == {"x": 500.0, "y": 500.0}
        assert root["measuredSize"] == {"width": 120.0, "height": 40.0}

    def test_layout_override(self, outline_file, capsys):
        assert main(["layout", str(outline_file), "-n", "120x40", "-l", "horizontal"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["layout"] == "horizontal"
        assert data["nodes"][0]["position"] == {"x": 100.0, "y": 100.0}

    def test_layout_needs_sizes(self, outline_file, capsys):
        assert main(["layout", str(outline_file)]) == 1
        assert "missing_measured_size" in capsys.readouterr().err

    def test_layout_bad_size(self, outline_file, capsys):
        assert main(["layout", str(outline_file), "-n", "wide"]) == 1
        assert "Invalid size format" in capsys.readouterr().err

    def test_layout_uses_configured_center(self, outline_file, capsys, monkeypatch):
        monkeypatch.setenv("MINDMARK_RADIAL_CENTER_X", "0")
        monkeypatch.setenv("MINDMARK_RADIAL_CENTER_Y", "0")
        assert main(["layout", str(outline_file), "-n", "120x40"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["nodes"][0]["position"] == {"x": 0.0, "y": 0.0}

    def test_style(self, capsys):
        assert main(["style", "color-blue h2 bold"]) == 0
        assert json.loads(capsys.readouterr().out) == {
            "stroke": "#2563eb",
            "fill": "#dbeafe",
            "fontSize": 20,
            "strokeWidth": 4,
        }

    def test_style_with_token_file(self, tmp_path, capsys):
        tokens = tmp_path / "tokens.json"
        tokens.write_text(json.dumps({"title": "color-red h1", "thin": {"strokeWidth": 0.5}}))
        assert main(["style", "title thin", "--tokens", str(tokens)]) == 0
        assert json.loads(capsys.readouterr().out) == {
            "stroke": "#dc2626",
            "fill": "#fee2e2",
            "fontSize": 24,
            "strokeWidth": 0.5,
        }

    def test_style_bad_token_file(self, tmp_path, capsys):
        tokens = tmp_path / "tokens.json"
        tokens.write_text("[1, 2]")
        assert main(["style", "thin", "--tokens", str(tokens)]) == 1
        assert "must contain a JSON object" in capsys.readouterr().err
