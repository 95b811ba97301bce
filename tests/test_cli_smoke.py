from typer.testing import CliRunner
from smartblocks.cli.cli import app

def test_cli_smoke():
    runner = CliRunner()
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("parse", "validate", "extract", "summarize", "reorder", "remove", "process", "stats"):
        assert command in result.output
