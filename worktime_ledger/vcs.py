"""
Git Sync

Commits and pushes an updated ledger file with the ``git`` command line.
"""

import subprocess
from pathlib import Path
from typing import List, Union

from .errors import VcsError
from .logging_setup import get_logger

logger = get_logger(__name__)


def _run_git(args: List[str], cwd: Union[str, Path]) -> None:
    command = ['git', *args]
    logger.info(f"Running: {' '.join(command)}")
    try:
        subprocess.run(command, cwd=str(cwd), check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        raise VcsError(f"git {args[0]} failed: {e}") from e


def commit_message(date_key: str, hours: float) -> str:
    return f"Log worktime {date_key}: {hours}h"


def commit_ledger(path: Union[str, Path], message: str, cwd: Union[str, Path]) -> None:
    """Stage the ledger file and commit it."""
    _run_git(['add', str(path)], cwd)
    _run_git(['commit', '-m', message], cwd)


def pull_rebase(cwd: Union[str, Path]) -> None:
    _run_git(['pull', '--rebase'], cwd)


def push(cwd: Union[str, Path]) -> None:
    _run_git(['push', 'origin', 'HEAD'], cwd)
