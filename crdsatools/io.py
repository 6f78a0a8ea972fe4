"""
File I/O utilities.

This module reads and writes the files a random-access decoder works with:
link results tables feeding the `LinkResultsOracle`, and replica lists used
to replay a frame outside of the simulation that produced it.

Functions
---------
load_link_results :
    Reads one BLER versus Es/N0 table.
load_link_results_dir :
    Reads every ``<modcod>.txt`` table of a directory.
load_link_results_any :
    Dispatches to one of the above depending on the path.
save_link_results :
    Writes a table in the format read by `load_link_results`.
save_records :
    Writes replica records to YAML.
load_records :
    Reads replica records back from YAML.
"""

from pathlib import Path
from typing import Dict, Iterable, List, Union

import numpy as np

from .core.records import PacketReplicaRecord
from .link import LinkResultCurve
from .logger import logger

PathLike = Union[str, Path]

# Fields describing what the physical layer delivered; the decoder state is
# rebuilt when the records are registered again.
_RECORD_INPUT_FIELDS = {
    "source_id",
    "packet_id",
    "home_slot",
    "sibling_slots",
    "signal",
    "link_params",
}


def load_link_results(path: PathLike) -> LinkResultCurve:
    """
    Reads a link results table.

    The file holds two whitespace-separated columns, Es/N0 in dB and BLER,
    one sample per line. Lines starting with ``#`` are comments.

    Parameters
    ----------
    path : str or Path
        Table file.

    Returns
    -------
    LinkResultCurve
        The parsed curve.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Link results file not found: {path}")

    data = np.loadtxt(path, comments="#", ndmin=2)
    if data.shape[1] != 2:
        raise ValueError(
            f"{path}: expected 2 columns (esno_db, bler), got {data.shape[1]}"
        )
    logger.debug(f"Loaded {data.shape[0]} link result points from {path}.")
    return LinkResultCurve(esno_db=data[:, 0], bler=data[:, 1])


def load_link_results_dir(path: PathLike, pattern: str = "*.txt") -> Dict[str, LinkResultCurve]:
    """
    Reads every table of a directory, keyed by file stem (the modcod name).
    """
    path = Path(path)
    if not path.is_dir():
        raise NotADirectoryError(f"Link results directory not found: {path}")

    curves = {f.stem: load_link_results(f) for f in sorted(path.glob(pattern))}
    if not curves:
        raise ValueError(f"No link results matching '{pattern}' in {path}")
    return curves


def load_link_results_any(path: PathLike) -> Dict[str, LinkResultCurve]:
    """A directory gives one curve per modcod, a file the ``"default"`` curve."""
    path = Path(path)
    if path.is_dir():
        return load_link_results_dir(path)
    return {"default": load_link_results(path)}


def save_link_results(curve: LinkResultCurve, path: PathLike, header: str = "") -> None:
    """Writes ``curve`` in the format read by `load_link_results`."""
    data = np.column_stack([curve.esno_db, curve.bler])
    np.savetxt(path, data, fmt="%.6g", header=header or "esno_db bler")


def save_records(records: Iterable[PacketReplicaRecord], path: PathLike) -> None:
    """
    Writes the physical-layer inputs of replica records to a YAML file.

    Payloads and decoder state are not written.
    """
    import yaml

    data = [r.model_dump(mode="json", include=_RECORD_INPUT_FIELDS) for r in records]
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def load_records(path: PathLike) -> List[PacketReplicaRecord]:
    """Reads replica records written by `save_records`, in file order."""
    import yaml

    with open(path, "r") as f:
        data = yaml.safe_load(f) or []
    return [PacketReplicaRecord(**item) for item in data]
