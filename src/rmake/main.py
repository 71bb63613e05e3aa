"""CLI entrypoint for rmake."""

import logging
from pathlib import Path

import rich_click as click

from rmake import __version__
from rmake.controllers import RMakeCliController, RunCommand
from rmake.errors import ModuleImportError

click.rich_click.USE_MARKDOWN = True
CONTROLLER = RMakeCliController()


@click.command()
@click.version_option(version=__version__, prog_name="rmake")
@click.argument("task_names", nargs=-1)
@click.option(
    "--file",
    "-f",
    default=None,
    help="Definitions file relative to the project root. Defaults to RMAKE_FILE or RMakefile.py.",
)
@click.option(
    "--script",
    "script_name",
    default=None,
    help="Collect tasks from the embedded script with this name instead of a file.",
)
@click.option(
    "--import",
    "modules",
    multiple=True,
    help="Module to import before collecting tasks (it may register embedded scripts). "
    "Can be repeated.",
)
@click.option(
    "--root",
    "project_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root the definitions file is resolved against.",
)
@click.option(
    "--trace/--no-trace",
    default=None,
    help="Print a backtrace of task code when a run fails.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log runner activity to stderr.")
def rmake(  # noqa: PLR0913
    task_names: tuple[str, ...],
    file: str | None,
    script_name: str | None,
    modules: tuple[str, ...],
    project_root: Path | None,
    trace: bool | None,
    verbose: bool,
) -> None:
    """Run tasks from an RMakefile, each after its dependencies.

    Without TASK_NAMES the `default` task runs; `help` or `tasks` lists the
    known tasks instead.
    """

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        outcome = CONTROLLER.run(
            RunCommand(
                task_names=task_names,
                file=file,
                script_name=script_name,
                project_root=project_root,
                trace=trace,
                modules=modules,
            ),
        )
    except ModuleImportError as error:
        raise click.ClickException(str(error)) from error
    if not outcome.collected:
        raise click.ClickException("No tasks were collected.")
    if not outcome.success:
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    rmake()
