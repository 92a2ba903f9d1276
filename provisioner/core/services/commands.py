"""
Shell command builders — the scripts executed on the remote host.

Every builder is a pure function returning script text. Each script
must be safe to replay: the init script runs again whenever its content
changes, and the run script whenever the triggers change.
"""

from __future__ import annotations

import base64
import posixpath
import shlex
from collections.abc import Iterable

from provisioner.core.models.sensitive import Sensitive

# Retries a command up to 10 times, sleeping 10s, 20s, 40s, ... in between.
# `set -e` is suspended only while the loop handles failures.
BASH_BACKOFF_RETRY_FUNCTION = """
function with_backoff {
  local max_attempts=10
  local timeout=10
  local attempt=0
  local exit_code=0

  set +e
  while [ "$attempt" -lt "$max_attempts" ]; do
    "$@"
    exit_code="$?"

    if [ "$exit_code" = 0 ]; then
      set -e
      break
    fi

    echo "Failure running ($*) [$exit_code]; retrying in $timeout." 1>&2
    sleep "$timeout"
    attempt="$((attempt + 1))"
    timeout="$((timeout * 2))"
  done

  if [ "$exit_code" != 0 ]; then
    echo "Failure running ($*) [$exit_code]; No more retries left." 1>&2
  fi

  set -e
  return "$exit_code"
}
"""

HEREDOC_DELIMITER = "EOF"


def concat_commands(fragments: Iterable[str | Sensitive | None]) -> str | Sensitive:
    """Join script fragments, each terminated by exactly one newline.

    ``None`` fragments are skipped. Strings not ending in a newline get one,
    so an empty string contributes a bare newline. If any fragment is
    sensitive the whole script is.
    """
    parts: list[str] = []
    secret = False

    for fragment in fragments:
        if fragment is None:
            continue
        if isinstance(fragment, Sensitive):
            secret = True
            fragment = fragment.reveal()
        parts.append(fragment)
        if not fragment.endswith("\n"):
            parts.append("\n")

    script = "".join(parts)
    return Sensitive(script) if secret else script


def build_remote_path_init_command(remote_path: str) -> str:
    """Create the remote directory and hand it to the connecting user."""
    return "".join([
        f'sudo mkdir -p "{remote_path}"\n',
        f'sudo chown -Rv "$USER:$USER" "{remote_path}"\n',
    ])


def build_file_write_command(path: str, contents: str) -> str:
    """Write ``contents`` to ``path`` on the remote host.

    A quoted heredoc is used unless the contents contain the heredoc
    delimiter, in which case the payload travels base64-encoded.
    """
    if HEREDOC_DELIMITER in contents:
        payload = base64.b64encode(contents.encode("utf-8")).decode("ascii")
        return f"echo '{payload}' | base64 -d | tee \"{path}\"\n"

    if not contents.endswith("\n"):
        contents += "\n"
    return "".join([
        f"cat << '{HEREDOC_DELIMITER}' | tee \"{path}\"\n",
        contents,
        f"{HEREDOC_DELIMITER}\n",
    ])


def build_clean_command(remote_path: str, file_list: Iterable[str]) -> str:
    """Delete every file under ``remote_path`` that is not in ``file_list``.

    Entries of ``file_list`` are relative to ``remote_path``. Enumeration
    is NUL-delimited so any filename is handled.
    """
    remote_path = posixpath.normpath(remote_path)
    keep = " ".join(
        f"[{shlex.quote(posixpath.join(remote_path, entry))}]=1" for entry in file_list
    )
    return "".join([
        f"declare -A keep_files=({keep})\n",
        "while IFS= read -r -d '' file; do\n",
        '  if [[ -z "${keep_files[$file]+x}" ]]; then\n',
        '    echo "Deleting: $file"\n',
        '    rm -f -- "$file"\n',
        "  fi\n",
        f'done < <(find "{remote_path}" -type f -print0)\n',
    ])


def build_run_command(
    remote_path: str,
    id: str,
    with_backoff: bool = True,
    with_backoff_definition: str | None = None,
) -> str:
    """Install Galaxy requirements (if any) and run the ``<id>.yml`` playbook."""
    if with_backoff:
        definition = (
            BASH_BACKOFF_RETRY_FUNCTION
            if with_backoff_definition is None
            else with_backoff_definition
        )
        prefix = "with_backoff "
    else:
        definition = None
        prefix = ""

    return concat_commands([
        "set -eu",
        definition,
        f'cd "{remote_path}"',
        f"if [[ -s requirements.yml ]]; then {prefix}ansible-galaxy install -r requirements.yml; fi",
        f"{prefix}ansible-playbook -i localhost, '{id}.yml'",
    ])
