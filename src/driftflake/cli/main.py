"""
driftflake CLI

Command-line interface for generating and inspecting ids.
Layout options are shared by all commands and can also come from
DRIFTFLAKE_* environment variables.

Usage:
    driftflake --worker-id 3 next --count 10
    driftflake --worker-id 3 parse 123456789012
    driftflake --worker-id 3 validate 123456789012 --strict
    driftflake --worker-id 3 format 123456789012
    driftflake --worker-id 3 config --json
"""

import json
import os
from typing import Optional

import typer
from typing_extensions import Annotated

from driftflake.generator.config import GenidMethod
from driftflake.genid import Genid
from driftflake.kernel.errors import ConfigurationError, InvalidIdError, RangeError
from driftflake.kernel.logging import configure_logging, is_production

# Logs go to stderr so stdout only carries command output
configure_logging(
    json_output=is_production(),
    log_level=os.getenv("DRIFTFLAKE_LOG_LEVEL", "WARNING"),
)

app = typer.Typer(
    name="driftflake",
    help="driftflake - time-ordered 64-bit id generator",
    add_completion=False,
)


def get_genid(ctx: typer.Context) -> Genid:
    """Build the generator from the global options"""
    try:
        return Genid(ctx.obj)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2)


@app.callback()
def main(
    ctx: typer.Context,
    worker_id: Annotated[
        Optional[int],
        typer.Option("--worker-id", envvar="DRIFTFLAKE_WORKER_ID", help="Worker id"),
    ] = None,
    worker_id_bits: Annotated[
        Optional[int],
        typer.Option(
            "--worker-id-bits",
            envvar="DRIFTFLAKE_WORKER_ID_BITS",
            help="Worker id field width (1-15)",
        ),
    ] = None,
    seq_bits: Annotated[
        Optional[int],
        typer.Option(
            "--seq-bits", envvar="DRIFTFLAKE_SEQ_BITS", help="Sequence field width (3-21)"
        ),
    ] = None,
    base_time: Annotated[
        Optional[int],
        typer.Option(
            "--base-time",
            envvar="DRIFTFLAKE_BASE_TIME",
            help="Epoch offset in Unix milliseconds",
        ),
    ] = None,
    method: Annotated[
        Optional[GenidMethod],
        typer.Option("--method", envvar="DRIFTFLAKE_METHOD", help="Generation algorithm"),
    ] = None,
) -> None:
    """Generate and inspect Snowflake-style ids"""
    ctx.obj = {
        "worker_id": worker_id,
        "worker_id_bits": worker_id_bits,
        "seq_bits": seq_bits,
        "base_time": base_time,
        "method": method,
    }


@app.command("next")
def next_ids(
    ctx: typer.Context,
    count: Annotated[int, typer.Option("--count", "-n", help="Number of ids")] = 1,
    narrow: Annotated[
        bool, typer.Option("--narrow", help="Fail if an id does not fit 53 bits")
    ] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON array")] = False,
) -> None:
    """Generate ids, one per line"""
    genid = get_genid(ctx)
    if count <= 0:
        typer.echo(f"Error: --count must be positive, got {count}", err=True)
        raise typer.Exit(2)

    try:
        ids = [genid.next_narrow() for _ in range(count)] if narrow else genid.next_batch(count)
    except RangeError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(json.dumps([str(value) for value in ids]))
        return
    for value in ids:
        typer.echo(str(value))


@app.command()
def parse(
    ctx: typer.Context,
    id_value: Annotated[str, typer.Argument(metavar="ID", help="Id to decode")],
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Decode an id into timestamp, worker id and sequence"""
    genid = get_genid(ctx)
    try:
        parsed = genid.parse(id_value)
    except InvalidIdError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    if as_json:
        typer.echo(parsed.model_dump_json())
        return
    typer.echo(f"Timestamp: {parsed.timestamp.isoformat()} ({parsed.timestamp_ms} ms)")
    typer.echo(f"Worker id: {parsed.worker_id}")
    typer.echo(f"Sequence:  {parsed.sequence}")


@app.command()
def validate(
    ctx: typer.Context,
    id_value: Annotated[str, typer.Argument(metavar="ID", help="Id to check")],
    strict: Annotated[
        bool, typer.Option("--strict", help="Also require this worker id")
    ] = False,
) -> None:
    """Check whether an id is structurally valid (exit 1 if not)"""
    genid = get_genid(ctx)
    if genid.is_valid(id_value, strict=strict):
        typer.echo("valid")
        return
    typer.echo("invalid")
    raise typer.Exit(1)


@app.command("format")
def format_id(
    ctx: typer.Context,
    id_value: Annotated[str, typer.Argument(metavar="ID", help="Id to render")],
) -> None:
    """Show the binary breakdown of an id"""
    genid = get_genid(ctx)
    try:
        typer.echo(genid.debug_format(id_value))
    except InvalidIdError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)


@app.command()
def config(
    ctx: typer.Context,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show the effective configuration"""
    summary = get_genid(ctx).get_config()
    if as_json:
        typer.echo(summary.model_dump_json())
        return
    typer.echo(f"Method:        {summary.method.value}")
    typer.echo(f"Worker id:     {summary.worker_id} (range {summary.worker_id_range})")
    typer.echo(f"Sequence:      {summary.sequence_range} (max {summary.max_sequence})")
    typer.echo(f"Ids per tick:  {summary.ids_per_tick}")
    typer.echo(f"Base time:     {summary.base_time.isoformat()}")
    typer.echo(
        f"Bits:          timestamp={summary.timestamp_bits} "
        f"worker={summary.worker_id_bits} sequence={summary.sequence_bits}"
    )


if __name__ == "__main__":
    app()
