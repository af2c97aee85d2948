import logging

import click

from zfsflex.config.settings import Config
from zfsflex.errors import DriverError, HostIOError, UsageError, ValidationError
from zfsflex.volumes.models import DriverResult

logger = logging.getLogger(__name__)


def emit(result: DriverResult):
    """Print the result record: stdout on success, stderr on failure."""
    click.echo(result.to_json(), err=result.status != "Success")


def get_manager(ctx):
    if "manager" not in ctx.obj:
        from zfsflex.volumes.manager import VolumeManager
        ctx.obj["manager"] = VolumeManager(ctx.obj["config"])
    return ctx.obj["manager"]


def fail(ctx, error: DriverError):
    """Emits the failure record and exits with the error's code."""
    logger.error(f"{ctx.info_name} failed: {error.message}")
    emit(DriverResult(status="Failed", message=error.message))
    ctx.exit(error.exit_code)


def run_driver_call(ctx, usage, args, required, call):
    """
    Runs one driver call and turns its outcome into the result record and the
    process exit code.
    """
    try:
        if len(args) < required:
            raise UsageError(usage)
        result = call(get_manager(ctx))
    except DriverError as e:
        fail(ctx, e)

    emit(result)


def configure_logging(config: Config):
    """Sends the package logs to the configured log file, if any."""
    if not config.log_file:
        return

    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        raise ValidationError(f"invalid log level: {config.log_level}")

    try:
        handler = logging.FileHandler(config.log_file)
    except OSError as e:
        raise HostIOError(f"unable to open log file: {e}") from e

    handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    package_logger = logging.getLogger("zfsflex")
    package_logger.addHandler(handler)
    package_logger.setLevel(level)


def _unsupported_command(name):
    @click.command(name=name, hidden=True)
    @click.argument("args", nargs=-1)
    @click.pass_context
    def unsupported(ctx, args):
        run_driver_call(ctx, name, args, 0, _raise_unsupported(name))

    return unsupported


def _raise_unsupported(name):
    def call(manager):
        raise UsageError(f"unsupported command: {name}")

    return call


class FlexVolumeGroup(click.Group):
    """Reports unknown commands through the result record instead of click's usage text."""

    def get_command(self, ctx, cmd_name):
        command = super(FlexVolumeGroup, self).get_command(ctx, cmd_name)
        if command is None:
            command = _unsupported_command(cmd_name)
        return command
