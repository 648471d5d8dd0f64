"""Table reader contract.

A structural Protocol: CSV, Excel and JSON readers are interchangeable and
can be stubbed in tests without inheriting from a base class.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import pandas as pd


@runtime_checkable
class TableReader(Protocol):
    """Minimal contract for turning a file into a DataFrame.

    - ``suffixes`` lists the lower-case file suffixes the reader accepts.
    - ``read`` is synchronous; options are reader specific.
    """

    suffixes: tuple[str, ...]

    def read(self, path: Path, **options: Any) -> pd.DataFrame:
        """Read ``path`` and return its contents as a DataFrame."""

        ...
