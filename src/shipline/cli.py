import functools
import logging
import traceback
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from . import __version__, constants
from .backends import GcloudBackend, WhalesBackend
from .config import Config
from .exceptions import (
    ConfigurationError,
    ResolutionError,
    ShiplineError,
    StepError,
)
from .pipeline import Pipeline, write_manifest
from .utils import head_commit, parse_module_levels, setup_logger


def complete_config_files(ctx, param, incomplete):
    """Auto-complete .yml and .yaml config files in current directory"""
    cwd = Path.cwd()
    yml_files = list(cwd.glob('*.yml')) + list(cwd.glob('*.yaml'))
    return sorted(f.name for f in yml_files if f.name.startswith(incomplete))


def parse_substitutions(pairs: Tuple[str, ...]) -> Dict[str, str]:
    """Parse repeated `-s _KEY=VALUE` options."""
    substitutions = {}
    for pair in pairs:
        if '=' not in pair:
            raise click.BadParameter(f"expected KEY=VALUE, got '{pair}'", param_hint="'-s' / '--substitution'")
        key, value = pair.split('=', 1)
        substitutions[key.strip()] = value
    return substitutions


def handle_errors(func):
    """Decorator to handle common exceptions"""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ConfigurationError as e:
            _report("Configuration error", e)
        except ResolutionError as e:
            _report("Resolution error", e)
        except StepError as e:
            _report(f"Step '{e.step}' error", e)
        except ShiplineError as e:
            _report("An unexpected pipeline error occurred", e)
        except KeyboardInterrupt:
            logging.error("Run cancelled by operator; no cleanup beyond what docker/gcloud perform.")
            raise click.Abort()
    return wrapper


def _report(prefix: str, e: Exception):
    logging.error(f"{prefix}: {e}")
    ctx = click.get_current_context()
    if ctx.obj.get('debug'):
        traceback.print_exc()
    raise click.Abort()


def load_config(config_file: str, project: Optional[str], profile: Optional[str], substitutions: Tuple[str, ...]) -> Config:
    config = Config(config_file)
    config.override(project_id=project, profile=profile, substitutions=parse_substitutions(substitutions) or None)
    return config


def make_pipeline(config: Config, commit: Optional[str]) -> Pipeline:
    if not commit:
        commit = head_commit(config.context_dir)
    return Pipeline(config, WhalesBackend(), GcloudBackend(), commit=commit)


def pipeline_options(func):
    """Options shared by every command that resolves a run."""
    options = [
        click.argument('config_file', default=constants.DEFAULT_CONFIG_FILENAME, shell_complete=complete_config_files),
        click.option('-c', '--commit', help='Commit identifier used as version tag (default: git HEAD of the context)'),
        click.option('-p', '--project', help='Project id (overrides project_id)'),
        click.option('--profile', type=str, help="Build profile, e.g. 'pinned' or 'floating'"),
        click.option('-s', '--substitution', 'substitutions', multiple=True, help='User substitution _KEY=VALUE (repeatable)'),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@handle_errors
def do_run(config_file, commit, project, profile, substitutions, manifest):
    """Execute run command"""
    config = load_config(config_file, project, profile, substitutions)
    pipeline = make_pipeline(config, commit)
    run = pipeline.run()

    manifest_path = Path(manifest) if manifest else config.output_dir / "run.json"
    write_manifest(run, manifest_path)

    if not run.succeeded:
        logging.error(f"Pipeline {run.outcome}")
        raise click.Abort()
    click.echo(run.images[0])


@handle_errors
def do_plan(config_file, commit, project, profile, substitutions):
    """Execute plan command"""
    config = load_config(config_file, project, profile, substitutions)
    pipeline = make_pipeline(config, commit)
    for name, command in pipeline.plan():
        click.echo(f"{name:<8} {' '.join(command)}")


@handle_errors
def do_render(config_file, commit, project, profile, substitutions, output):
    """Execute render command"""
    config = load_config(config_file, project, profile, substitutions)
    pipeline = make_pipeline(config, commit)
    pipeline.resolve()
    if output:
        pipeline.image.write(Path(output))
    else:
        click.echo(pipeline.image.render(), nl=False)


@handle_errors
def do_ref(config_file, commit, project, profile, substitutions):
    """Execute ref command"""
    config = load_config(config_file, project, profile, substitutions)
    click.echo(str(make_pipeline(config, commit).resolve().image))


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('-l', '--log-levels', help="Comma-separated per-module log levels (e.g., 'sub=DEBUG,pipe=INFO')")
@click.option('-f', '--log-file', help='Path to log file')
@click.version_option(version=__version__, prog_name='shipline')
@click.pass_context
def cli(ctx, debug, log_levels, log_file):
    """shipline - Build, push and deploy a service image in one fail-fast run

    \b
    Examples:
      shipline run shipline.yml -c abc123          Build, push and deploy abc123
      shipline plan shipline.yml --profile floating Show the commands of a run
      shipline render shipline.yml                 Print the rendered Dockerfile
    """
    ctx.ensure_object(dict)
    ctx.obj['debug'] = debug
    setup_logger(debug=debug, module_levels=parse_module_levels(log_levels), log_file=log_file)


@cli.command()
@pipeline_options
@click.option('-m', '--manifest', help='Where to write the JSON run record (default: <output>/<name>/run.json)')
@click.pass_context
def run(ctx, config_file, commit, project, profile, substitutions, manifest):
    """Build, push and deploy the service

    \b
    Steps run strictly in order and the first failure stops the run:
      1. build   docker buildx build --tag <ref> --load
      2. push    docker push <ref>
      3. deploy  gcloud run deploy <service> --image <ref>
    """
    do_run(config_file, commit, project, profile, substitutions, manifest)


@cli.command()
@pipeline_options
@click.pass_context
def plan(ctx, config_file, commit, project, profile, substitutions):
    """Resolve everything and print the step commands without running them"""
    do_plan(config_file, commit, project, profile, substitutions)


@cli.command()
@pipeline_options
@click.option('-o', '--output', help='Directory to write the Dockerfile into instead of printing it')
@click.pass_context
def render(ctx, config_file, commit, project, profile, substitutions, output):
    """Render the multi-stage Dockerfile for the selected profile"""
    do_render(config_file, commit, project, profile, substitutions, output)


@cli.command()
@pipeline_options
@click.pass_context
def ref(ctx, config_file, commit, project, profile, substitutions):
    """Print the image reference a run would build, push and deploy"""
    do_ref(config_file, commit, project, profile, substitutions)
