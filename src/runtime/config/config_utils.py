import os
import re
from collections.abc import Mapping

# ${NAME}, ${NAME:-default} or ${NAME:?message}
_PLACEHOLDER = re.compile(
    r"\$\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?:(?P<op>:[-?])(?P<arg>[^}]*))?\}"
)


def substitute_env_vars(text: str, environ: Mapping[str, str] | None = None) -> str:
    """
    Substitute environment variable placeholders in config text.

    Supports formats:
    - ${VAR_NAME} - required variable
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message

    Comment lines are left untouched. Every missing required variable is
    reported in a single error so CI jobs can be fixed in one pass.

    Raises:
        ValueError: If any required variable is unset
    """
    env = os.environ if environ is None else environ
    missing: list[str] = []

    def replacer(match: re.Match[str]) -> str:
        name, op, arg = match.group("name", "op", "arg")
        value = env.get(name)
        if value is not None:
            return value
        if op == ":-":
            return arg
        missing.append(f"{name}: {arg}" if op == ":?" else f"{name} not set")
        return match.group(0)

    lines = [
        line if line.lstrip().startswith("#") else _PLACEHOLDER.sub(replacer, line)
        for line in text.splitlines(keepends=True)
    ]
    if missing:
        raise ValueError(f"Required environment variable {'; '.join(missing)}")
    return "".join(lines)
