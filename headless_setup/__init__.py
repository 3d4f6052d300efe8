"""Headless credential setup (ssh-agent via keychain, pass, Git Credential Manager).

Core design goals:
- Desired state is declared, not scripted
- Idempotent steps that probe before they mutate
- Best-effort steps are reported, never silently dropped
- Centralized logging
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
