"""Shared fixtures."""

import pandas as pd
import pytest

from core.config import AppSettings


@pytest.fixture
def settings(tmp_path):
    """Settings that ignore any .env file on the machine."""
    return AppSettings(
        _env_file=None,
        data_root=tmp_path / "data",
        output_root=tmp_path / "output",
    )


@pytest.fixture
def people_df():
    return pd.DataFrame(
        {
            "id": [1, 2, 3],
            "name": ["Ana", "Ben", None],
            "entry_date": pd.to_datetime(["2025-01-05", "2025-02-10", None]),
        }
    )
