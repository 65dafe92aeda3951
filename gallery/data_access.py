from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from forestkit.types import Record
from forestkit.visualization import load_records

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data"


def resolve_data_dir(data_dir: Optional[Path | str] = None) -> Path:
    return Path(data_dir) if data_dir else DEFAULT_DATA_DIR


def dataset_path(data_dir: Optional[Path | str], name: str) -> Path:
    path = resolve_data_dir(data_dir) / name
    if not path.exists():
        raise FileNotFoundError(f"Dataset '{name}' not found under {resolve_data_dir(data_dir)}")
    return path


def load_dataset(
    data_dir: Optional[Path | str],
    name: str,
    *,
    estimate: Optional[str] = None,
    lower: Optional[str] = None,
    upper: Optional[str] = None,
    text_columns: Sequence[str] = (),
    indent: str = "  ",
) -> List[Record]:
    """Load one of the gallery CSVs, optionally picking a specific estimate triple."""
    return load_records(
        dataset_path(data_dir, name),
        estimate=estimate,
        lower=lower,
        upper=upper,
        text_columns=text_columns,
        indent=indent,
    )
