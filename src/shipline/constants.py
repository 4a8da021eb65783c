# --- Log and Debug ---
# Short aliases for module names to keep CLI/env concise
LOG_ALIAS_MAP = {
    "sub": "shipline.substitute",
    "pipe": "shipline.pipeline",
    "pip": "shipline.pipeline",
    "img": "shipline.images",
    "image": "shipline.images",
    "conf": "shipline.config",
    "step": "shipline.steps",
    "bkd": "shipline.backends",
    "backend": "shipline.backends",
    "git": "shipline.utils.git",
}

# Top-level modules within shipline for auto-prefixing
KNOWN_TOP_MODULES = {
    "backends",
    "cli",
    "config",
    "datacls",
    "images",
    "pipeline",
    "steps",
    "substitute",
    "utils",
}

LOG_LEVELS_ENV = "SHIPLINE_LOG_LEVELS"

# --- Filenames and Paths ---
DOCKERFILE_NAME = "Dockerfile"
DEFAULT_CONFIG_FILENAME = "shipline.yml"
MULTISTAGE_TEMPLATE = "multistage"

# --- Substitutions ---
# Built-in variables, provided by the pipeline rather than by the user
BUILTIN_PROJECT_ID = "PROJECT_ID"
BUILTIN_COMMIT_SHA = "COMMIT_SHA"
BUILTIN_SHORT_SHA = "SHORT_SHA"
BUILTIN_VARIABLES = (BUILTIN_PROJECT_ID, BUILTIN_COMMIT_SHA, BUILTIN_SHORT_SHA)
SHORT_SHA_LENGTH = 7

# User-defined substitutions must start with an underscore
USER_SUBSTITUTION_PATTERN = r"^_[A-Z0-9_]+$"


DEFAULT_IMAGE_REF = (
    "${_LOCATION}-docker.pkg.dev/$PROJECT_ID/${_REPOSITORY}/${_IMAGE}/${_SERVICE_NAME}:$COMMIT_SHA"
)
REGISTRY_HOST_SUFFIX = "-docker.pkg.dev"
DEFAULT_SERVICE = "${_SERVICE_NAME}"
DEFAULT_REGION = "${_SERVICE_REGION}"

# --- Build Profiles ---
PROFILE_PINNED = "pinned"
PROFILE_FLOATING = "floating"
FLOATING_TAG = "latest"
DEFAULT_TOOLCHAIN = "rust"
DEFAULT_PINNED_VERSION = "1.79"
DEFAULT_PROFILES = {
    PROFILE_PINNED: {"toolchain": f"{DEFAULT_TOOLCHAIN}:{DEFAULT_PINNED_VERSION}", "reproducible": True},
    PROFILE_FLOATING: {"toolchain": f"{DEFAULT_TOOLCHAIN}:{FLOATING_TAG}", "reproducible": False},
}

# --- Image Builder ---
BUILD_SRC_DIR = "/src"
RELEASE_SUBDIR = "target/release"
BUILD_COMMAND = "cargo build --release"
# Intermediate outputs of the release directory that never reach the runtime image
PRUNED_ARTIFACTS = ["build", "deps", "examples", "incremental"]

RUNTIME_BASE = "debian:bookworm-slim"
RUNTIME_WORKDIR = "/app"
RUNTIME_PACKAGES = ["apt-transport-https", "wget", "curl", "gnupg", "openssl"]
DEFAULT_PORT = 80

# --- Pipeline ---
STEP_BUILD = "build"
STEP_PUSH = "push"
STEP_DEPLOY = "deploy"

GCLOUD_BINARY = "gcloud"
