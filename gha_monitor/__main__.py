"""Allow ``python -m gha_monitor``."""

from .workers.actions_monitor_worker import cli

if __name__ == "__main__":
    cli()
