from tests.infrastructure.cli_utils import run_cli, jload
from tests.infrastructure.file_utils import write


def test_cli_render(site):
    cp = run_cli(site, "render", "index.shtml", "--set", "USER_NAME=Ann")
    assert cp.returncode == 0, cp.stderr
    assert "<h1>Home</h1>\n" in cp.stdout
    assert cp.stdout.endswith("Hello, Ann\n")


def test_cli_render_request_variables(tmp_path):
    write(tmp_path / "a.shtml", '<!--#echo var="DOCUMENT_URI" -->?<!--#echo var="QUERY_STRING_UNESCAPED" -->')
    cp = run_cli(tmp_path, "render", "a.shtml", "--uri", "/a.shtml", "--query", "x=1")
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == "/a.shtml?x=1"


def test_cli_render_virtual_root(tmp_path):
    write(tmp_path / "www" / "inc" / "f.html", "footer")
    write(tmp_path / "pages" / "a.shtml", '<!--#include virtual="/inc/f.html" -->')
    cp = run_cli(tmp_path, "render", "pages/a.shtml", "--root", "www")
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == "footer"


def test_cli_no_exec(tmp_path):
    write(tmp_path / "ssi.yaml", 'errmsg: "[no]"\n')
    write(tmp_path / "a.shtml", '<!--#exec cmd="echo hi" -->')
    cp = run_cli(tmp_path, "render", "a.shtml", "--no-exec")
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout == "[no]"


def test_cli_missing_document(tmp_path):
    cp = run_cli(tmp_path, "render", "nope.shtml")
    assert cp.returncode == 2
    assert "Forbidden" in cp.stderr


def test_cli_bad_variable(tmp_path):
    write(tmp_path / "a.shtml", "x")
    cp = run_cli(tmp_path, "render", "a.shtml", "--set", "NOVALUE")
    assert cp.returncode == 2
    assert "NAME=VALUE" in cp.stderr


def test_cli_bad_config(tmp_path):
    write(tmp_path / "ssi.yaml", "bogus: 1\n")
    cp = run_cli(tmp_path, "config")
    assert cp.returncode == 2
    assert "unknown key" in cp.stderr


def test_cli_config(tmp_path):
    write(tmp_path / "ssi.yaml", 'timefmt: "%Y"\n')
    cp = run_cli(tmp_path, "config", "--root", "www", "--no-exec")
    assert cp.returncode == 0, cp.stderr
    data = jload(cp.stdout)
    assert data["timefmt"] == "%Y"
    assert data["document_root"] == "www"
    assert data["exec_enabled"] is False
    assert data["errmsg"] == "[an error occurred while processing this directive]"


def test_cli_version(tmp_path):
    cp = run_cli(tmp_path, "--version")
    assert cp.returncode == 0, cp.stderr
    assert cp.stdout.startswith("ssi ")
