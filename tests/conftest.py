"""Shared pytest fixtures for site builder tests."""
import pytest
import yaml

from sitebuild.config import Config


INDEX_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Home</title>
  <link rel="stylesheet" href="css/style.css">
  <link rel="icon" href="favicon.ico">
  <link rel="stylesheet" href="https://cdn.example.com/lib.css">
</head>
<body>
  <img src="img/logo.png" alt="logo">
  <script src="/js/app.js"></script>
  <script src="data:text/javascript;base64,Y29uc29sZS5sb2coMSk="></script>
</body>
</html>
"""

POST_HTML = """<!DOCTYPE html>
<html>
<head>
  <link rel="stylesheet" href="../style.css">
  <link rel="stylesheet" href="../../css/style.css">
</head>
<body>
  <script src="post.js"></script>
</body>
</html>
"""

PLAIN_HTML = """<!DOCTYPE html>
<html><head><title>About</title></head><body><p>No assets<br></p></body></html>
"""


def write_file(path, content):
    """Write text or bytes, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def site_dir(tmp_path):
    """Create a small source tree."""
    site = tmp_path / "site"
    write_file(site / "index.html", INDEX_HTML)
    write_file(site / "about.html", PLAIN_HTML)
    write_file(site / "favicon.ico", b"\x00\x00\x01\x00")
    write_file(site / "img" / "logo.png", b"\x89PNG\r\n\x1a\nfake")
    write_file(site / "robots", "User-agent: *\n")
    write_file(site / "css" / "style.css", "body {\n  color: red;\n}\n")
    write_file(
        site / "js" / "app.js",
        "// entry\nfunction greet(name) {\n  return 'hi ' + name;\n}\n",
    )
    write_file(site / "blog" / "style.css", "h1 {\n  margin: 0;\n}\n")
    write_file(site / "blog" / "post" / "index.html", POST_HTML)
    write_file(site / "blog" / "post" / "post.js", "console.log('post');\n")
    return site


@pytest.fixture
def test_config_dict(tmp_path, site_dir):
    """Return a test configuration dictionary."""
    return {
        "paths": {
            "input_dir": str(site_dir),
            "output_dir": str(tmp_path / "dist"),
            "manifest_name": "manifest.json",
        },
        "bundle": {
            "extensions": [".js", ".css"],
            "minify": True,
            "hash_length": 8,
        },
        "logging": {"level": "DEBUG"},
    }


@pytest.fixture
def test_config_file(tmp_path, test_config_dict):
    """Create a temporary test configuration file."""
    config_file = tmp_path / "sitebuild.yaml"
    with open(config_file, "w") as f:
        yaml.dump(test_config_dict, f)
    return str(config_file)


@pytest.fixture
def test_config(test_config_file):
    """Create a test Config instance."""
    return Config(test_config_file)


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run in an empty working directory without SITEBUILD_CONFIG."""
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.delenv("SITEBUILD_CONFIG", raising=False)
    return workdir
