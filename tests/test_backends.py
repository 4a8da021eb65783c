import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest
from python_on_whales import DockerException
from python_on_whales.client_config import ClientNotFoundError

from shipline.backends import GcloudBackend, WhalesBackend, deploy_command
from shipline.backends import gcloud as gcloud_module
from shipline.exceptions import BuildStepError, DeployStepError, PushStepError

REF = "us-central1-docker.pkg.dev/proj-1/repo-a/svc-img/travel-agency:abc123"


class TestGcloudBackend:

    def test_deploy_command(self):
        assert deploy_command('travel-agency', REF, 'us-central1', 'proj-1', ['--port=80']) == [
            'gcloud', 'run', 'deploy', 'travel-agency',
            '--image', REF,
            '--region', 'us-central1',
            '--project', 'proj-1',
            '--quiet',
            '--port=80',
        ]

    def test_deploy_success(self, monkeypatch):
        seen = []

        def fake_run(command, **kwargs):
            seen.append((command, kwargs))
            return subprocess.CompletedProcess(command, 0, stdout="", stderr="Done.")

        monkeypatch.setattr(gcloud_module.subprocess, "run", fake_run)
        GcloudBackend(binary='/opt/gcloud').deploy('travel-agency', REF, 'us-central1', 'proj-1')
        command, kwargs = seen[0]
        assert command[0] == '/opt/gcloud'
        assert command[command.index('--image') + 1] == REF
        assert kwargs['check'] is True

    def test_deploy_failure_carries_native_detail(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise subprocess.CalledProcessError(1, command, output="", stderr="ERROR: (gcloud.run.deploy) Quota exceeded\n")

        monkeypatch.setattr(gcloud_module.subprocess, "run", fake_run)
        with pytest.raises(DeployStepError) as exc:
            GcloudBackend().deploy('travel-agency', REF, 'us-central1', 'proj-1')
        assert exc.value.cause == "ERROR: (gcloud.run.deploy) Quota exceeded"
        assert exc.value.exit_code == 1
        assert exc.value.step == 'deploy'

    def test_missing_binary(self, monkeypatch):
        def fake_run(command, **kwargs):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(gcloud_module.subprocess, "run", fake_run)
        with pytest.raises(DeployStepError) as exc:
            GcloudBackend().deploy('travel-agency', REF, 'us-central1', 'proj-1')
        assert exc.value.exit_code == 127


def _raise(command, code, stderr):
    def _fn(*args, **kwargs):
        raise DockerException(command, code, stdout=None, stderr=stderr)
    return _fn


class TestWhalesBackend:

    def test_build_and_push(self, tmp_path):
        seen = {}

        def build(context, **kwargs):
            seen['build'] = (context, kwargs)

        def push(tag):
            seen['push'] = tag

        client = SimpleNamespace(buildx=SimpleNamespace(build=build), image=SimpleNamespace(push=push))
        backend = WhalesBackend(client=client)
        backend.build(tmp_path, tmp_path / "Dockerfile", REF, {"k": "v"})
        backend.push(REF)

        context, kwargs = seen['build']
        assert context == str(tmp_path)
        assert kwargs['tags'] == [REF]
        assert kwargs['file'] == str(tmp_path / "Dockerfile")
        assert kwargs['load'] is True
        assert seen['push'] == REF

    def test_build_failure(self, tmp_path):
        client = SimpleNamespace(
            buildx=SimpleNamespace(build=_raise(["docker", "buildx", "build"], 1, b"error[E0425]: cannot find value\n")),
        )
        with pytest.raises(BuildStepError) as exc:
            WhalesBackend(client=client).build(tmp_path, Path("Dockerfile"), REF, {})
        assert exc.value.cause == "error[E0425]: cannot find value"
        assert exc.value.exit_code == 1

    def test_push_failure(self):
        client = SimpleNamespace(
            image=SimpleNamespace(push=_raise(["docker", "image", "push"], 1, b"denied: Permission denied")),
        )
        with pytest.raises(PushStepError, match="denied"):
            WhalesBackend(client=client).push(REF)

    @pytest.mark.parametrize("operation, error", [("build", BuildStepError), ("push", PushStepError)])
    def test_missing_docker_binary(self, tmp_path, operation, error):
        def not_found(*args, **kwargs):
            raise ClientNotFoundError("The binary 'docker' could not be found on your PATH.")

        client = SimpleNamespace(buildx=SimpleNamespace(build=not_found), image=SimpleNamespace(push=not_found))
        backend = WhalesBackend(client=client)
        with pytest.raises(error) as exc:
            if operation == "build":
                backend.build(tmp_path, tmp_path / "Dockerfile", REF, {})
            else:
                backend.push(REF)
        assert exc.value.exit_code == 127
        assert "could not be found" in exc.value.cause
