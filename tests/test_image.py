import pytest

from shipline.config import ImageModel, ProfileModel
from shipline.datacls import BuildScope
from shipline.exceptions import ConfigValidationError, ProfileError
from shipline.images import MultiStageImage, select_profile

PROFILES = {
    'pinned': ProfileModel(toolchain='rust:1.79'),
    'floating': ProfileModel(toolchain='rust:latest'),
}


@pytest.fixture
def image_model():
    return ImageModel(binary='travel-agency')


def _stages(content: str):
    """Split a rendered Dockerfile into (build stage, runtime stage)."""
    build, runtime = content.split("\n\nFROM ", 1)
    return build, "FROM " + runtime


class TestSelectProfile:

    def test_pinned_is_reproducible(self):
        profile = select_profile(PROFILES, 'pinned')
        assert profile.toolchain == 'rust:1.79'
        assert profile.reproducible is True

    def test_floating_is_not_reproducible(self):
        profile = select_profile(PROFILES, 'floating')
        assert profile.toolchain == 'rust:latest'
        assert profile.reproducible is False

    def test_unknown_profile(self):
        with pytest.raises(ProfileError):
            select_profile(PROFILES, 'nightly')


class TestMultiStageImage:

    def test_render_defaults(self, image_model):
        content = MultiStageImage(image_model, select_profile(PROFILES, 'pinned')).render()
        assert content == (
            "FROM rust:1.79 AS builder\n"
            "WORKDIR /src\n"
            "COPY . .\n"
            "RUN cargo build --release\n"
            "WORKDIR /src/target/release\n"
            "RUN rm -rf ./build ./deps ./examples ./incremental\n"
            "WORKDIR /src\n"
            "\n"
            "FROM debian:bookworm-slim\n"
            "RUN apt-get update && apt-get install -y apt-transport-https wget curl gnupg openssl && \\\n"
            "    rm -rf /var/lib/apt/lists/*\n"
            "WORKDIR /app\n"
            "COPY --from=builder /src/target/release .\n"
            "EXPOSE 80\n"
            "\n"
            'CMD ["/app/travel-agency"]\n'
        )

    def test_runtime_stage_only_copies_release_dir(self, image_model):
        content = MultiStageImage(image_model, select_profile(PROFILES, 'pinned')).render()
        build, runtime = _stages(content)
        copies = [line for line in runtime.splitlines() if line.startswith("COPY")]
        assert copies == ["COPY --from=builder /src/target/release ."]
        assert "rust" not in runtime
        assert "cargo" not in runtime
        # pruning happens in the build stage, before the copy
        assert "RUN rm -rf ./build ./deps ./examples ./incremental" in build

    def test_profiles_share_port_and_entrypoint(self, image_model):
        pinned = MultiStageImage(image_model, select_profile(PROFILES, 'pinned'))
        floating = MultiStageImage(image_model, select_profile(PROFILES, 'floating'))
        assert pinned.port == floating.port == 80
        assert pinned.entrypoint == floating.entrypoint == ["/app/travel-agency"]
        _, pinned_runtime = _stages(pinned.render())
        _, floating_runtime = _stages(floating.render())
        assert pinned_runtime == floating_runtime
        assert pinned.render() != floating.render()

    def test_pinned_render_is_deterministic(self, image_model):
        first = MultiStageImage(image_model, select_profile(PROFILES, 'pinned'))
        second = MultiStageImage(ImageModel(binary='travel-agency'), select_profile(PROFILES, 'pinned'))
        assert first.render() == second.render()
        assert first.digest() == second.digest()

    def test_custom_runtime(self):
        image = ImageModel(binary='svc', port=8080, packages=[], prune=['deps'], runtime_base='debian:bookworm')
        content = MultiStageImage(image, select_profile(PROFILES, 'pinned')).render()
        assert "apt-get" not in content
        assert "RUN rm -rf ./deps\n" in content
        assert "FROM debian:bookworm\nWORKDIR /app\n" in content
        assert "EXPOSE 8080" in content
        assert content.endswith('CMD ["/app/svc"]\n')

    def test_no_prune_entries(self):
        image = ImageModel(binary='svc', prune=[])
        content = MultiStageImage(image, select_profile(PROFILES, 'pinned')).render()
        assert "rm -rf ./" not in content
        assert "WORKDIR /src/target/release\nWORKDIR /src\n" in content

    def test_write(self, image_model, tmp_path):
        image = MultiStageImage(image_model, select_profile(PROFILES, 'pinned'))
        path = image.write(tmp_path / "out")
        assert path == tmp_path / "out" / "Dockerfile"
        assert path.read_text(encoding="utf-8") == image.render()


class TestScopes:

    @pytest.mark.parametrize("entry", ["", "..", "target/deps", "."])
    def test_prune_entries_stay_inside_release_dir(self, entry):
        with pytest.raises(ConfigValidationError):
            BuildScope(toolchain='rust:1.79', prune=[entry])

    def test_release_dir(self):
        assert BuildScope(toolchain='rust:1.79').release_dir == "/src/target/release"
