import click

from zfsflex.cli.utils import FlexVolumeGroup, configure_logging, fail, run_driver_call
from zfsflex.config.settings import Config
from zfsflex.errors import DriverError, UsageError
from zfsflex.version import get_version


@click.group(cls=FlexVolumeGroup, invoke_without_command=True)
@click.option("--parent", help="Parent dataset under which volumes are created.")
@click.option("--mounts", help="Path to the mount table.")
@click.option("--log-file", help="Write driver logs to this file.")
@click.version_option(get_version(), prog_name="zfsflex")
@click.pass_context
def main(ctx, parent, mounts, log_file):
    """ZFS FlexVolume driver"""
    ctx.ensure_object(dict)
    config = Config(parent_dataset=parent, mounts_path=mounts, log_file=log_file)
    ctx.obj.setdefault("config", config)

    try:
        configure_logging(ctx.obj["config"])
    except DriverError as e:
        fail(ctx, e)

    if ctx.invoked_subcommand is None:
        fail(ctx, UsageError("zfsflex <command> [args...]"))


@main.command()
@click.argument("args", nargs=-1)
@click.pass_context
def init(ctx, args):
    """Initialize the driver."""
    run_driver_call(ctx, "init", args, 0, lambda m: m.init())


@main.command()
@click.argument("args", nargs=-1)
@click.pass_context
def attach(ctx, args):
    """Attach the volume described by the given options on the given host."""
    run_driver_call(ctx, "attach <json params> <nodename>", args, 1, lambda m: m.attach(args[0]))


@main.command(name="waitforattach")
@click.argument("args", nargs=-1)
@click.pass_context
def wait_for_attach(ctx, args):
    """Wait for the volume to be attached on the remote node."""
    run_driver_call(
        ctx,
        "waitforattach <mount device> <json params>",
        args,
        2,
        lambda m: m.wait_for_attach(args[0], args[1]),
    )


@main.command(name="isattached")
@click.argument("args", nargs=-1)
@click.pass_context
def is_attached(ctx, args):
    """Check the volume is attached on the node."""
    run_driver_call(
        ctx,
        "isattached <json options> <node name>",
        args,
        1,
        lambda m: m.is_attached(args[0], args[1] if len(args) > 1 else ""),
    )


@main.command()
@click.argument("args", nargs=-1)
@click.pass_context
def detach(ctx, args):
    """Detach the volume from the node."""
    run_driver_call(
        ctx,
        "detach <mount device> <node name>",
        args,
        0,
        lambda m: m.detach(args[0] if args else "", args[1] if len(args) > 1 else None),
    )


@main.command(name="mountdevice")
@click.argument("args", nargs=-1)
@click.pass_context
def mount_device(ctx, args):
    """Mount the device to a global path which individual pods can then bind mount."""
    run_driver_call(
        ctx,
        "mountdevice <mount dir> <mount device> <json options>",
        args,
        3,
        lambda m: m.mount_device(args[0], args[1], args[2]),
    )


@main.command()
@click.argument("args", nargs=-1)
@click.pass_context
def mount(ctx, args):
    """Mount the volume at the mount dir."""
    run_driver_call(ctx, "mount <mount dir> <json options>", args, 2, lambda m: m.mount(args[0], args[1]))


@main.command(name="unmountdevice")
@click.argument("args", nargs=-1)
@click.pass_context
def unmount_device(ctx, args):
    """Unmount the global mount for the device."""
    run_driver_call(ctx, "unmountdevice <mount device>", args, 1, lambda m: m.unmount_device(args[0]))


@main.command()
@click.argument("args", nargs=-1)
@click.pass_context
def unmount(ctx, args):
    """Unmount the volume."""
    run_driver_call(ctx, "unmount <mount dir>", args, 1, lambda m: m.unmount(args[0]))


@main.command(name="getvolumename")
@click.argument("args", nargs=-1)
@click.pass_context
def get_volume_name(ctx, args):
    """Get a cluster wide unique volume name for the volume."""
    run_driver_call(ctx, "getvolumename <json options>", args, 1, lambda m: m.get_volume_name(args[0]))
