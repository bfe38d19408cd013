"""Shared pytest configuration."""

import pytest

from branch_finance.infrastructure.logging import logger as logger_module


@pytest.fixture(autouse=True, scope="session")
def _logs_in_tmp_dir(tmp_path_factory):
    """Keep log files written during the run out of the project tree."""
    log_root = tmp_path_factory.mktemp("log_root")
    with pytest.MonkeyPatch.context() as patcher:
        patcher.setattr(logger_module, "get_project_root", lambda: log_root)
        yield
