"""Tests for compilers and the bundler."""
from pathlib import PurePosixPath

import pytest

from sitebuild.bundler import (
    BundleOutput,
    Bundler,
    compute_hash,
    find_entry_points,
    hashed_relative_path,
)
from sitebuild.compilers.base import BaseCompiler
from sitebuild.compilers.minify import (
    CssCompiler,
    JsCompiler,
    PassthroughCompiler,
    get_compiler,
)
from sitebuild.config import BundleConfig
from sitebuild.errors import CompilationError
from sitebuild.filesystem import relative_posix


class TestCompilers:
    """Tests for the minifying compilers."""

    def test_css_minified(self):
        """Test stylesheet whitespace is collapsed."""
        result = CssCompiler().compile("body {\n  color: red;\n}\n")
        assert result.startswith("body{color:red")
        assert "\n" not in result

    def test_js_minified(self):
        """Test script comments and indentation are removed."""
        result = JsCompiler().compile("// comment\nvar a = 1;\n")
        assert "comment" not in result
        assert "var a=1;" in result

    def test_minifiers_do_not_validate_syntax(self):
        """Test malformed sources are minified rather than rejected."""
        assert CssCompiler().compile("body {\n  color: red;\n").startswith("body{color:red")
        assert isinstance(JsCompiler().compile("function f( {\n"), str)

    def test_passthrough(self):
        """Test the pass-through compiler returns its input."""
        assert PassthroughCompiler().compile("a  b\n") == "a  b\n"

    def test_get_compiler(self):
        """Test compiler selection by extension."""
        assert isinstance(get_compiler(".css"), CssCompiler)
        assert isinstance(get_compiler(".JS"), JsCompiler)
        assert isinstance(get_compiler(".mjs"), PassthroughCompiler)
        assert isinstance(get_compiler(".js", minify=False), PassthroughCompiler)

    def test_base_compiler_is_abstract(self):
        """Test BaseCompiler cannot be instantiated."""
        with pytest.raises(TypeError):
            BaseCompiler()


class TestHashing:
    """Tests for compute_hash and hashed_relative_path."""

    def test_hash_deterministic(self):
        """Test same bytes give the same hash."""
        assert compute_hash(b"abc") == compute_hash(b"abc")
        assert compute_hash(b"abc") != compute_hash(b"abd")

    def test_hash_length(self):
        """Test hash is truncated to the requested length."""
        assert len(compute_hash(b"abc")) == 8
        assert len(compute_hash(b"abc", 12)) == 12

    def test_hashed_relative_path(self):
        """Test the hash is inserted before the extension."""
        assert hashed_relative_path("js/app.js", "1a2b3c4d") == PurePosixPath("js/app-1a2b3c4d.js")
        assert hashed_relative_path("style.css", "ffff0000") == PurePosixPath("style-ffff0000.css")

    def test_hashed_relative_path_dotted_name(self):
        """Test only the last extension is kept after the hash."""
        assert hashed_relative_path("js/htmx.min.js", "abcd1234") == PurePosixPath(
            "js/htmx.min-abcd1234.js"
        )


class TestFindEntryPoints:
    """Tests for find_entry_points."""

    def test_selects_scripts_and_stylesheets(self, site_dir):
        """Test only .js and .css files are selected."""
        found = [relative_posix(site_dir, p) for p in find_entry_points(site_dir)]
        assert found == [
            "blog/post/post.js",
            "blog/style.css",
            "css/style.css",
            "js/app.js",
        ]

    def test_case_insensitive(self, tmp_path):
        """Test extension matching ignores case."""
        (tmp_path / "A.JS").write_text("x")
        (tmp_path / "b.Css").write_text("y")
        (tmp_path / "c.json").write_text("{}")
        assert sorted(p.name for p in find_entry_points(tmp_path)) == ["A.JS", "b.Css"]

    def test_custom_extensions(self, tmp_path):
        """Test the extension set can be configured."""
        (tmp_path / "a.mjs").write_text("x")
        (tmp_path / "b.js").write_text("y")
        assert [p.name for p in find_entry_points(tmp_path, [".mjs"])] == ["a.mjs"]


class TestBundler:
    """Tests for Bundler."""

    @pytest.fixture
    def bundler(self):
        return Bundler(BundleConfig({}))

    def test_bundle_writes_hashed_files(self, bundler, site_dir, tmp_path):
        """Test each entry point is written under its hashed name."""
        out = tmp_path / "out"
        entry_points = find_entry_points(site_dir)
        outputs = bundler.bundle(entry_points, site_dir, out)

        assert len(outputs) == len(entry_points)
        for output in outputs:
            assert isinstance(output, BundleOutput)
            assert output.output_path.exists()
            assert output.content_hash in output.output_path.name
            assert output.content_hash == compute_hash(output.output_path.read_bytes())

        css = next(o for o in outputs if o.entry_point == site_dir / "css" / "style.css")
        assert css.output_path == out / "css" / f"style-{css.content_hash}.css"
        assert css.output_path.read_text().startswith("body{color:red")

    def test_bundle_is_idempotent(self, bundler, site_dir, tmp_path):
        """Test rebuilding unchanged sources yields identical names and bytes."""
        first = bundler.bundle(find_entry_points(site_dir), site_dir, tmp_path / "a")
        second = bundler.bundle(find_entry_points(site_dir), site_dir, tmp_path / "b")

        assert [o.content_hash for o in first] == [o.content_hash for o in second]
        for a, b in zip(first, second):
            assert a.output_path.read_bytes() == b.output_path.read_bytes()

    def test_files_processed_standalone(self, bundler, tmp_path):
        """Test imports are not resolved or inlined."""
        source = tmp_path / "src"
        source.mkdir()
        (source / "main.js").write_text("import { x } from './dep.js';\nconsole.log(x);\n")
        (source / "dep.js").write_text("export const x = 42;\n")

        outputs = bundler.bundle([source / "main.js"], source, tmp_path / "out")

        compiled = outputs[0].output_path.read_text()
        assert "./dep.js" in compiled
        assert "42" not in compiled

    def test_no_minify(self, site_dir, tmp_path):
        """Test minification can be disabled while still hashing."""
        bundler = Bundler(BundleConfig({"minify": False}))
        outputs = bundler.bundle([site_dir / "css" / "style.css"], site_dir, tmp_path / "out")
        assert outputs[0].output_path.read_bytes() == (site_dir / "css" / "style.css").read_bytes()

    def test_compile_error_aborts_without_output(self, bundler, site_dir, tmp_path):
        """Test one failing entry point leaves nothing written."""
        (site_dir / "js" / "broken.js").write_bytes(b"var s = '\xff\xfe';\n")
        out = tmp_path / "out"

        with pytest.raises(CompilationError) as exc:
            bundler.bundle(find_entry_points(site_dir), site_dir, out)

        assert exc.value.entry_point == site_dir / "js" / "broken.js"
        assert "UTF-8" in str(exc.value)
        assert not out.exists() or not any(out.rglob("*.*"))

    def test_compiler_exception_wrapped(self, bundler, site_dir, tmp_path, monkeypatch):
        """Test compiler failures become CompilationError."""
        def explode(self, source):
            raise ValueError("boom")

        monkeypatch.setattr(JsCompiler, "compile", explode)

        with pytest.raises(CompilationError) as exc:
            bundler.bundle([site_dir / "js" / "app.js"], site_dir, tmp_path / "out")

        assert "rjsmin: boom" in str(exc.value)
        assert isinstance(exc.value.__cause__, ValueError)

    def test_empty_entry_points(self, bundler, tmp_path):
        """Test bundling nothing returns an empty list."""
        assert bundler.bundle([], tmp_path, tmp_path / "out") == []
