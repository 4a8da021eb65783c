import logging
import re
from typing import Dict, Iterable, List, Optional, Set

from . import constants
from .datacls import VariableNamespace
from .exceptions import InvalidSubstitutionError, UndefinedVariableError

logger = logging.getLogger(__name__)

# `$$` is a literal dollar; `${NAME}` and `$NAME` are variables
_PATTERN = re.compile(
    r"\$(?:(?P<escaped>\$)|\{(?P<braced>[^{}]*)\}|(?P<named>[A-Z_][A-Z0-9_]*)|(?P<invalid>))"
)
_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")


def build_namespace(substitutions: Dict[str, str], project_id: Optional[str], commit: Optional[str]) -> VariableNamespace:
    """
    Resolves the variable namespace of a run once, before any step executes.

    The commit identifier becomes COMMIT_SHA and its first characters SHORT_SHA.
    Missing built-ins are fatal here, not when a step first needs them.
    """
    if not project_id:
        raise UndefinedVariableError(f"Built-in variable '{constants.BUILTIN_PROJECT_ID}' is not set (use 'project_id' or --project).")
    if not commit:
        raise UndefinedVariableError(f"Built-in variable '{constants.BUILTIN_COMMIT_SHA}' is not set (use --commit or run inside a git checkout).")
    commit = commit.strip()
    if not re.match(r"^[A-Za-z0-9_.-]+$", commit):
        raise InvalidSubstitutionError(f"Commit identifier '{commit}' cannot be used as an image tag.")

    values = {
        constants.BUILTIN_PROJECT_ID: project_id,
        constants.BUILTIN_COMMIT_SHA: commit,
        constants.BUILTIN_SHORT_SHA: commit[:constants.SHORT_SHA_LENGTH],
    }
    values.update(substitutions)
    logger.debug(f"Variable namespace resolved with keys: {sorted(values)}")
    return VariableNamespace(values=values)


class VariableSubstitutor:
    """
    Expands `$NAME` / `${NAME}` references against a resolved namespace.

    Expansion is a single pass: substituted values are never expanded again.
    Every undefined reference is collected so one error names all of them.
    """

    def __init__(self, namespace: VariableNamespace):
        self.namespace = namespace
        self.referenced: Set[str] = set()

    def substitute(self, template: str) -> str:
        missing: List[str] = []

        def _repl(m: re.Match) -> str:
            if m.group("escaped") is not None:
                return "$"
            if m.group("invalid") is not None:
                raise InvalidSubstitutionError(f"Dangling '$' in '{template}'; use '$$' for a literal dollar sign.")
            key = m.group("braced") if m.group("braced") is not None else m.group("named")
            if not _NAME.match(key):
                raise InvalidSubstitutionError(f"Invalid variable name '${{{key}}}' in '{template}'.")
            self.referenced.add(key)
            if key not in self.namespace:
                missing.append(key)
                return m.group(0)
            value = self.namespace[key]
            logger.debug(f"[Substitute] variable '${key}' replaced with '{value}'.")
            return value

        result = _PATTERN.sub(_repl, template)
        if missing:
            raise UndefinedVariableError(
                f"Undefined variable(s) {', '.join(sorted(set(missing)))} in '{template}'."
            )
        return result

    def substitute_all(self, templates: Iterable[str]) -> List[str]:
        """Substitute a list, reporting every undefined variable across all items."""
        results: List[str] = []
        errors: List[str] = []
        for template in templates:
            try:
                results.append(self.substitute(template))
            except UndefinedVariableError as e:
                errors.append(str(e))
        if errors:
            raise UndefinedVariableError("\n".join(errors))
        return results

    def unused(self) -> Set[str]:
        """User substitutions that no template referenced so far."""
        return {
            key for key in self.namespace.values
            if key not in constants.BUILTIN_VARIABLES and key not in self.referenced
        }
