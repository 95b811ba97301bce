"""CLI entrypoint: Typer app definition and command registration"""

import typer

from smartblocks.cli.commands import (
    extract_cmd,
    parse_cmd,
    process_cmd,
    remove_cmd,
    reorder_cmd,
    stats_cmd,
    summarize_cmd,
    validate_cmd,
)


app = typer.Typer(name="smartblocks", no_args_is_help=True, help="Smart blocks in markdown notes")

app.command(name="parse")(parse_cmd)
app.command(name="validate")(validate_cmd)
app.command(name="extract")(extract_cmd)
app.command(name="summarize")(summarize_cmd)
app.command(name="reorder")(reorder_cmd)
app.command(name="remove")(remove_cmd)
app.command(name="process")(process_cmd)
app.command(name="stats")(stats_cmd)
