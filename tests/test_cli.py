"""Tests for flowscan.cli"""

import io
import json
import pytest
from flowscan import __version__
from flowscan.cli import main, parse_args
from flowscan.errors import ConfigurationError


@pytest.fixture
def clean_java_file(tmp_path):
    target = tmp_path / "Clean.java"
    target.write_text("int x = 5;\nSystem.out.println(x);\n")
    return target


class TestParseArgs:
    def test_defaults(self):
        args = parse_args(["Example.java"])
        assert args.source == "Example.java"
        assert args.format == "console"
        assert args.analyses is None
        assert args.hints is None
        assert args.must_boundary is None

    def test_repeated_analysis(self):
        args = parse_args(["x.java", "-a", "reaching", "-a", "busy"])
        assert args.analyses == ["reaching", "busy"]

    def test_invalid_analysis(self):
        with pytest.raises(SystemExit):
            parse_args(["x.java", "-a", "taint"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    def test_warnings_exit_code(self, example_java_file, capsys):
        assert main([str(example_java_file), "--no-color"]) == 1
        out = capsys.readouterr().out
        assert "DATAFLOW ANALYSIS RESULTS" in out
        assert "Variable 'unused' is never used" in out

    def test_clean_exit_code(self, clean_java_file):
        assert main([str(clean_java_file)]) == 0

    def test_json_output_file(self, example_java_file, tmp_path):
        output = tmp_path / "out.json"
        code = main([str(example_java_file), "-f", "json", "-o", str(output), "-a", "live"])

        assert code == 1
        data = json.loads(output.read_text())
        assert list(data["analysisResults"]) == ["live"]
        assert data["analysisResults"]["live"][-1]["line"] == 7

    def test_non_convergence_exit_code(self, example_java_file, capsys):
        code = main([str(example_java_file), "--max-iterations", "1", "-a", "reaching"])
        assert code == 2
        assert "did not converge" in capsys.readouterr().out

    def test_stdin_with_language(self, fixtures_dir, monkeypatch, capsys):
        source = (fixtures_dir / "example.cpp").read_text()
        monkeypatch.setattr("sys.stdin", io.StringIO(source))

        code = main(["-", "-l", "cpp", "-f", "json"])

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["language"] == "cpp"

    def test_config_file(self, example_java_file, fixtures_dir, tmp_path):
        output = tmp_path / "out.json"
        code = main([str(example_java_file), "-c", str(fixtures_dir / "hints.yaml"),
                     "-f", "json", "-o", str(output)])

        data = json.loads(output.read_text())
        assert list(data["analysisResults"]) == ["available", "busy"]
        assert data["summary"]["warning"] == 0
        assert code == 0

    def test_flags_override_config(self, example_java_file, fixtures_dir, tmp_path):
        output = tmp_path / "out.json"
        main([str(example_java_file), "-c", str(fixtures_dir / "hints.yaml"),
              "-a", "reaching", "-f", "json", "-o", str(output)])

        data = json.loads(output.read_text())
        assert list(data["analysisResults"]) == ["reaching"]

    def test_missing_source(self, capsys):
        assert main([]) == 1
        assert "No source file" in capsys.readouterr().err

    def test_nonexistent_source(self, tmp_path, capsys):
        assert main([str(tmp_path / "Missing.java")]) == 1
        assert "does not exist" in capsys.readouterr().err

    def test_bad_config(self, example_java_file, fixtures_dir, capsys):
        code = main([str(example_java_file), "-c", str(fixtures_dir / "bad_config.yaml")])
        assert code == 1
        assert "Unknown configuration keys" in capsys.readouterr().err

    def test_bad_config_debug_raises(self, example_java_file, fixtures_dir):
        with pytest.raises(ConfigurationError):
            main([str(example_java_file), "-c", str(fixtures_dir / "bad_config.yaml"), "--debug"])

    def test_unsupported_language(self, example_java_file, capsys):
        assert main([str(example_java_file), "-l", "fortran"]) == 1
        assert "fortran" in capsys.readouterr().err

    def test_list_languages(self, capsys):
        assert main(["--list-languages"]) == 0
        out = capsys.readouterr().out
        assert "java" in out
        assert "cpp" in out

    def test_latin1_source(self, tmp_path, capsys):
        source = tmp_path / "Cafe.java"
        source.write_bytes('String s = "café";\nSystem.out.println(s);\n'.encode('latin-1'))

        assert main([str(source), "--no-color"]) == 0
        assert "café" in capsys.readouterr().out

    def test_directory_source(self, tmp_path, capsys):
        assert main([str(tmp_path)]) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_list_languages_from_config_dir(self, tmp_path, capsys):
        languages = tmp_path / "languages"
        languages.mkdir()
        (languages / "csharp.yaml").write_text("name: csharp\nextensions: [.cs]\n")
        config = tmp_path / "flowscan.yaml"
        config.write_text(f"languages_dir: {languages.as_posix()}\n")

        assert main(["--list-languages", "-c", str(config)]) == 0
        assert "csharp" in capsys.readouterr().out

    def test_list_languages_bad_config(self, fixtures_dir, capsys):
        assert main(["--list-languages", "-c", str(fixtures_dir / "bad_config.yaml")]) == 1
        assert "Unknown configuration keys" in capsys.readouterr().err
