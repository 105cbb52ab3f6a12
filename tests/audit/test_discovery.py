"""Tests for ecosystem detection, manifest reading, binary and README discovery."""

from conftest import write_executable, write_files

from uxaudit.audit.discovery.binary_discovery import discover_binary, resolve_binary_name
from uxaudit.audit.discovery.documentation import (
    extract_feature_list,
    extract_fenced_blocks,
    find_readme,
    score_readme_quality,
)
from uxaudit.audit.discovery.ecosystem import detect_ecosystem, read_manifest
from uxaudit.audit.discovery.file_walker import find_source_files, is_test_file
from uxaudit.audit.domain.enums import Ecosystem


class TestDetectEcosystem:
    """Test marker precedence."""

    def test_package_json_wins(self, tmp_path):
        write_files(tmp_path, {"package.json": {"name": "x"}, "Cargo.toml": "[package]\nname = 'x'\n"})

        info = detect_ecosystem(tmp_path)

        assert info.ecosystem == Ecosystem.NODEJS
        assert info.marker == "package.json"
        assert info.installable

    def test_makefile_is_not_installable(self, tmp_path):
        write_files(tmp_path, {"Makefile": "all:\n"})

        info = detect_ecosystem(tmp_path)

        assert info.ecosystem == Ecosystem.MAKE
        assert not info.installable
        assert info.profile is None

    def test_empty_directory(self, tmp_path):
        assert detect_ecosystem(tmp_path).ecosystem == Ecosystem.UNKNOWN


class TestReadManifest:
    """Test manifest merging."""

    def test_package_json(self, tmp_path):
        write_files(
            tmp_path,
            {
                "package.json": {
                    "name": "@scope/mytool",
                    "version": "1.0.0",
                    "license": "MIT",
                    "bin": "./cli.js",
                    "dependencies": {"lodash": "^4.17.15"},
                    "devDependencies": {"jest": "^29.0.0"},
                }
            },
        )

        manifest = read_manifest(tmp_path)

        assert manifest.source == "package.json"
        assert manifest.name == "@scope/mytool"
        assert manifest.scripts == {"mytool": "./cli.js"}
        assert manifest.dependencies == {"lodash": "^4.17.15", "jest": "^29.0.0"}

    def test_pyproject_with_requirements(self, tmp_path):
        write_files(
            tmp_path,
            {
                "pyproject.toml": (
                    '[project]\nname = "pytool"\nversion = "0.3.0"\n'
                    'dependencies = ["click>=8.0"]\n\n[project.scripts]\npytool = "pytool.cli:main"\n'
                ),
                "requirements.txt": "requests==2.25.0  # pinned\n-e .\n",
            },
        )

        manifest = read_manifest(tmp_path)

        assert manifest.source == "pyproject.toml"
        assert manifest.scripts == {"pytool": "pytool.cli:main"}
        assert manifest.dependencies == {"click": ">=8.0", "requests": "==2.25.0"}

    def test_invalid_package_json_is_ignored(self, tmp_path):
        write_files(tmp_path, {"package.json": "{not json"})

        assert read_manifest(tmp_path).source is None


class TestDiscoverBinary:
    """Test binary discovery strategies."""

    def test_package_json_bin_uses_node(self, tmp_path):
        write_files(tmp_path, {"package.json": {"name": "mytool", "bin": {"mytool": "cli.js"}}, "cli.js": "// cli"})

        binary = discover_binary(tmp_path)

        assert binary.strategy == "package.json bin"
        assert binary.argv(["--help"]) == ("node", [str(tmp_path / "cli.js"), "--help"])

    def test_conventional_output(self, tmp_path):
        write_files(tmp_path, {"dist/cli.js": "// cli"})

        binary = discover_binary(tmp_path)

        assert binary.strategy == "conventional output"
        assert binary.interpreter == "node"

    def test_naming_convention(self, good_tool_project):
        binary = discover_binary(good_tool_project)

        assert binary.strategy == "naming convention"
        assert binary.path == str(good_tool_project / "bin" / "goodtool")
        assert binary.argv(["list"]) == (binary.path, ["list"])

    def test_non_executable_file_is_skipped(self, tmp_path):
        root = tmp_path / "uxaudit-no-such-tool-xyz"
        write_files(root, {"bin/uxaudit-no-such-tool-xyz": "#!/bin/sh\n"})

        assert discover_binary(root) is None

    def test_cargo_release_build(self, tmp_path):
        write_files(tmp_path, {"Cargo.toml": '[package]\nname = "rtool"\nversion = "0.1.0"\n'})
        write_executable(tmp_path / "target" / "release" / "rtool", "#!/bin/sh\n")

        binary = discover_binary(tmp_path)

        assert binary.strategy == "cargo release"

    def test_resolve_binary_name(self, tmp_path):
        write_files(tmp_path, {"package.json": {"name": "@scope/mytool"}})

        assert resolve_binary_name(tmp_path) == "mytool"


class TestDocumentation:
    """Test README helpers."""

    def test_readme_candidates_in_order(self, tmp_path):
        write_files(tmp_path, {"README.rst": "rst", "README.md": "# md"})

        assert find_readme(tmp_path).name == "README.md"

    def test_fenced_blocks_and_features(self):
        content = (
            "# Tool\n\n## Features\n- init projects\n* list things\n\n## Usage\n"
            "```bash\ntool init\n```\n\n```python\nprint(1)\n```\n"
        )

        blocks = extract_fenced_blocks(content)

        assert [b.language for b in blocks] == ["bash", "python"]
        assert blocks[0].body == "tool init\n"
        assert extract_feature_list(content) == ["init projects", "list things"]

    def test_quality_of_rich_readme(self, tmp_path):
        lines = ["# Tool", "", "## Installation", "## Usage", "## Features", "## Contributing", "## License"]
        lines += ["```", "tool run", "```", "See https://example.com", "![logo](logo.png)"]
        lines += ["filler"] * 40
        write_files(tmp_path, {"README.md": "\n".join(lines)})

        assert score_readme_quality(find_readme(tmp_path)) == 10.0


class TestFileWalker:
    def test_excluded_directories_are_skipped(self, tmp_path):
        write_files(tmp_path, {"src/app.py": "x = 1", "node_modules/dep/index.js": "x", "src/notes.md": "x"})

        assert find_source_files(tmp_path) == [tmp_path / "src" / "app.py"]

    def test_test_file_patterns(self, tmp_path):
        assert is_test_file(tmp_path / "test_cli.py")
        assert is_test_file(tmp_path / "cli.test.js")
        assert is_test_file(tmp_path / "main_test.go")
        assert not is_test_file(tmp_path / "cli.py")
