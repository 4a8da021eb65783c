import copy
from pathlib import Path

import pytest
import yaml

from shipline.exceptions import BuildStepError, DeployStepError, PushStepError

BASE_CONFIG = {
    'name': 'travel-agency',
    'project_id': 'proj-1',
    'substitutions': {
        '_LOCATION': 'us-central1',
        '_REPOSITORY': 'repo-a',
        '_IMAGE': 'svc-img',
        '_SERVICE_NAME': 'travel-agency',
        '_SERVICE_REGION': 'us-central1',
    },
    'context': '.',
    'image': {
        'binary': 'travel-agency',
    },
}

EXPECTED_REF = "us-central1-docker.pkg.dev/proj-1/repo-a/svc-img/travel-agency:abc123"


@pytest.fixture
def base_config() -> dict:
    return copy.deepcopy(BASE_CONFIG)


@pytest.fixture
def create_config_file(tmp_path: Path):
    """A pytest fixture to create a temporary shipline.yml file."""
    def _create_file(config_data: dict) -> Path:
        config_file = tmp_path / "shipline.yml"
        with open(config_file, 'w') as f:
            yaml.dump(config_data, f)
        return config_file
    return _create_file


class RecordingContainer:
    """Container backend double; records calls and fails on request."""

    def __init__(self, calls: list, fail_build: str = None, fail_push: str = None):
        self.calls = calls
        self.fail_build = fail_build
        self.fail_push = fail_push

    def build(self, context, dockerfile, tag, labels):
        self.calls.append(("build", tag))
        self.context, self.dockerfile, self.labels = context, dockerfile, labels
        if self.fail_build:
            raise BuildStepError(self.fail_build, 101)

    def push(self, tag):
        self.calls.append(("push", tag))
        if self.fail_push:
            raise PushStepError(self.fail_push, 1)


class RecordingPlatform:
    """Platform backend double; records calls and fails on request."""

    def __init__(self, calls: list, fail_deploy: str = None):
        self.calls = calls
        self.fail_deploy = fail_deploy

    def deploy(self, service, image, region, project, flags=()):
        self.calls.append(("deploy", image))
        self.service, self.region, self.project, self.flags = service, region, project, tuple(flags)
        if self.fail_deploy:
            raise DeployStepError(self.fail_deploy, 1)


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def container(calls):
    return RecordingContainer(calls)


@pytest.fixture
def platform(calls):
    return RecordingPlatform(calls)


@pytest.fixture
def make_backends(calls):
    """Build a (container, platform) pair sharing one call log."""
    def _make(fail_build=None, fail_push=None, fail_deploy=None):
        return (
            RecordingContainer(calls, fail_build=fail_build, fail_push=fail_push),
            RecordingPlatform(calls, fail_deploy=fail_deploy),
        )
    return _make
