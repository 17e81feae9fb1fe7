import functools
import logging

import click.testing
import pytest

from kubecast.cli import CLIControls, main
from kubecast._kits.clients import ResourceClient


@pytest.fixture(autouse=True)
def _restore_logging():
    # Every command configures the logging; keep it from leaking to other tests.
    names = ['', 'asyncio', 'urllib3', 'kubernetes']
    saved = {name: (logging.getLogger(name).level,
                    logging.getLogger(name).propagate,
                    logging.getLogger(name).handlers[:]) for name in names}
    yield
    for name, (level, propagate, handlers) in saved.items():
        logging.getLogger(name).setLevel(level)
        logging.getLogger(name).propagate = propagate
        logging.getLogger(name).handlers[:] = handlers


@pytest.fixture()
def resource_client(settings, models, handles):
    return ResourceClient(settings, models=models, handles=handles)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner, resource_client):
    return functools.partial(runner.invoke, main, obj=CLIControls(client=resource_client))
