import asyncio
import dataclasses
import functools
from typing import Any, Awaitable, Callable, Collection, Iterable, List, Optional

import click
import yaml

from kubecast._cogs.configs import configuration
from kubecast._cogs.helpers import loaders
from kubecast._core.actions import loggers, materialization
from kubecast._kits import clients


@dataclasses.dataclass()
class CLIControls:
    """ `ResourceClient` controls, which are impossible to pass via CLI. """
    client: Optional[clients.ResourceClient] = None
    settings: Optional[configuration.ClientSettings] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='full')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.FULL,
                log_prefix: Optional[bool] = False,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def _run(
        controls: CLIControls,
        fn: Callable[[clients.ResourceClient], Awaitable[Any]],
) -> Any:
    async def _main() -> Any:
        client = controls.client
        if client is None:
            client = clients.ResourceClient(settings=controls.settings)
        await client.init()
        return await fn(client)
    return asyncio.run(_main())


def _echo(objs: Iterable[Any]) -> None:
    raws = [materialization.to_raw(obj) for obj in objs]
    if raws:
        click.echo(yaml.safe_dump_all(raws, sort_keys=False), nl=False)


@click.version_option(prog_name='kubecast')
@click.group(name='kubecast', context_settings=dict(
    auto_envvar_prefix='KUBECAST',
))
def main() -> None:
    pass


@main.command()
@logging_options
@click.option('-f', '--filename', 'paths', multiple=True, required=True, type=click.Path(exists=True))
@click.make_pass_decorator(CLIControls, ensure=True)
def apply(__controls: CLIControls, paths: Collection[str]) -> None:
    """ Create or patch the objects from the manifest files. """
    manifests = loaders.load_manifests(paths)
    _echo(_run(__controls, lambda client: client.apply_all(manifests)))


@main.command()
@logging_options
@click.option('-f', '--filename', 'paths', multiple=True, required=True, type=click.Path(exists=True))
@click.make_pass_decorator(CLIControls, ensure=True)
def create(__controls: CLIControls, paths: Collection[str]) -> None:
    """ Create the objects from the manifest files. """
    manifests = loaders.load_manifests(paths)
    _echo(_run(__controls, lambda client: client.create_all(manifests)))


@main.command()
@logging_options
@click.option('-f', '--filename', 'paths', multiple=True, required=True, type=click.Path(exists=True))
@click.make_pass_decorator(CLIControls, ensure=True)
def delete(__controls: CLIControls, paths: Collection[str]) -> None:
    """ Delete the objects from the manifest files. """
    manifests = loaders.load_manifests(paths)
    _run(__controls, lambda client: client.delete_all(manifests))


@main.command()
@logging_options
@click.option('-n', '--namespace', type=str)
@click.argument('kind')
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def get(__controls: CLIControls, kind: str, name: str, namespace: Optional[str]) -> None:
    """ Show an object of a kind by its name. """
    obj = _run(__controls, lambda client: client.get(kind, name, namespace))
    _echo([obj])


@main.command(name='list')
@logging_options
@click.option('-n', '--namespace', type=str)
@click.option('-A', '--all-namespaces', 'clusterwide', is_flag=True)
@click.argument('kind')
@click.make_pass_decorator(CLIControls, ensure=True)
def list_(__controls: CLIControls, kind: str, namespace: Optional[str], clusterwide: bool) -> None:
    """ Show all objects of a kind, in one or in all namespaces. """
    if namespace and clusterwide:
        raise click.UsageError("Either --namespace or --all-namespaces can be used, not both.")

    async def _list(client: clients.ResourceClient) -> List[Any]:
        return await client.list(kind, None if clusterwide else namespace or client.default_namespace)

    _echo(_run(__controls, _list))


@main.command()
@logging_options
@click.option('-n', '--namespace', type=str)
@click.argument('kind')
@click.argument('name')
@click.make_pass_decorator(CLIControls, ensure=True)
def exists(__controls: CLIControls, kind: str, name: str, namespace: Optional[str]) -> None:
    """ Check if an object exists; exit with status 1 if it does not. """
    found = _run(__controls, lambda client: client.exists(kind, name, namespace))
    click.echo('yes' if found else 'no')
    if not found:
        raise click.exceptions.Exit(1)


@main.command()
@logging_options
@click.argument('kind')
@click.make_pass_decorator(CLIControls, ensure=True)
def versions(__controls: CLIControls, kind: str) -> None:
    """ Show the preferred API versions of a kind. """

    async def _versions(client: clients.ResourceClient) -> List[str]:
        return client.preferred_api_versions(kind)

    for api_version in _run(__controls, _versions):
        click.echo(api_version)
