from __future__ import annotations

import os

from headless_setup.lib import keychain


def test_parse_eval_output_reads_sh_assignments():
    text = (
        "SSH_AUTH_SOCK=/tmp/ssh-abc/agent.12; export SSH_AUTH_SOCK;\n"
        "SSH_AGENT_PID=13; export SSH_AGENT_PID;\n"
    )

    assert keychain.parse_eval_output(text) == {
        "SSH_AUTH_SOCK": "/tmp/ssh-abc/agent.12",
        "SSH_AGENT_PID": "13",
    }


def test_parse_eval_output_strips_quotes_and_ignores_noise():
    text = "* keychain 2.8.5\nexport GPG_AGENT_INFO='/run/user/1000/gnupg/S.gpg-agent'\n"

    assert keychain.parse_eval_output(text) == {"GPG_AGENT_INFO": "/run/user/1000/gnupg/S.gpg-agent"}


def test_acquire_agent_exports_socket(host, environ):
    host.install("keychain", "openssh-client")
    status = keychain.acquire_agent(host.config().keychain_argv, environ=environ)

    assert status.valid is True
    assert environ["SSH_AUTH_SOCK"] == host.sock_path
    assert environ["SSH_AGENT_PID"] == "4242"
    assert host.ran("keychain", "--eval", "--quiet", "--nogui", "id_ed25519", "id_rsa")


def test_acquire_agent_rejects_non_socket_path(host, tmp_path):
    plain = tmp_path / "not-a-socket"
    plain.write_text("")
    host.agent_works = False
    env = {"SSH_AUTH_SOCK": str(plain)}

    status = keychain.acquire_agent(host.config().keychain_argv, environ=env)

    assert status.sock == str(plain)
    assert status.valid is False


def test_acquire_agent_without_keychain(host, environ):
    host.install("keychain", "openssh-client")
    status = keychain.acquire_agent(host.config().keychain_argv, environ=environ)
    assert status.valid is True

    host.remove_binary("keychain")
    fresh = {}
    status = keychain.acquire_agent(host.config().keychain_argv, environ=fresh)
    assert status.sock is None
    assert status.valid is False


def test_loaded_identities(host, environ):
    host.install("keychain", "openssh-client")
    keychain.acquire_agent(host.config().keychain_argv, environ=environ)
    assert keychain.loaded_identities(environ=environ) is None

    host.identities = ["256 SHA256:abc dev@example.com (ED25519)"]
    assert keychain.loaded_identities(environ=environ) == ["256 SHA256:abc dev@example.com (ED25519)"]


def test_loaded_identities_asks_the_acquired_agent(host, environ):
    host.install("keychain", "openssh-client")
    host.identities = ["256 SHA256:abc dev@example.com (ED25519)"]

    keychain.acquire_agent(host.config().keychain_argv, environ=environ)

    # The process environment has no agent; only the injected mapping does.
    assert "SSH_AUTH_SOCK" not in os.environ
    assert keychain.loaded_identities(environ=environ) == host.identities
    assert keychain.loaded_identities(environ={}) is None
