from __future__ import annotations

import logging
import os
import re
import stat
from dataclasses import dataclass
from typing import Dict, List, Mapping, MutableMapping, Optional, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

SOCK_VAR = "SSH_AUTH_SOCK"
PID_VAR = "SSH_AGENT_PID"

# keychain --eval prints sh syntax: NAME=value; export NAME;
_ASSIGN_RE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


@dataclass(frozen=True)
class AgentStatus:
    sock: Optional[str]
    valid: bool
    assignments: Dict[str, str]


def parse_eval_output(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for line in text.splitlines():
        for stmt in line.split(";"):
            m = _ASSIGN_RE.match(stmt.strip())
            if not m:
                continue
            name, value = m.group(1), m.group(2).strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                value = value[1:-1]
            out[name] = value
    return out


def is_socket(path: Optional[str]) -> bool:
    if not path:
        return False
    try:
        return stat.S_ISSOCK(os.stat(path).st_mode)
    except OSError:
        return False


def acquire_agent(
    argv: Sequence[str],
    *,
    environ: Optional[MutableMapping[str, str]] = None,
) -> AgentStatus:
    """Start or attach to ssh-agent through keychain and export its socket.

    Whether a new agent is spawned is keychain's decision.
    """

    env = os.environ if environ is None else environ
    # keychain reuses a live agent named by these variables.
    r = run_cmd(list(argv), check=False, env={k: env[k] for k in (SOCK_VAR, PID_VAR) if env.get(k)})
    if not r.ok:
        logger.warning("keychain exited %s: %s", r.returncode, r.stderr.strip())
    assignments = parse_eval_output(r.stdout)
    for name, value in assignments.items():
        env[name] = value

    sock = env.get(SOCK_VAR) or None
    return AgentStatus(sock=sock, valid=is_socket(sock), assignments=assignments)


def loaded_identities(environ: Optional[Mapping[str, str]] = None) -> Optional[List[str]]:
    """Fingerprint lines from `ssh-add -l`, or None when none are loaded.

    `environ` should be the mapping acquire_agent exported into, so ssh-add
    talks to that agent.
    """

    env = os.environ if environ is None else environ
    agent_env = {k: env[k] for k in (SOCK_VAR, PID_VAR) if env.get(k)}
    r = run_cmd(["ssh-add", "-l"], check=False, env=agent_env)
    if not r.ok:
        return None
    return [l for l in r.stdout.splitlines() if l.strip()]
