"""Progress reporting for the station catalog build.

The first catalog build geocodes every station one at a time under the
provider rate limit, which takes a couple of minutes.  Pass
``on_progress="tqdm"`` to :class:`~mymeteo.catalog.CatalogBuilder` for a
`tqdm <https://tqdm.github.io/>`_ bar, or any callable taking a
:class:`CatalogProgress`.  The bar needs the optional dependency::

    pip install mymeteo[progress]
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CatalogProgress:
    """Progress event emitted after each station is geocoded.

    Attributes:
        done: Number of stations processed so far.
        total: Number of unique station names to process.
        name: Name of the station just processed.
    """

    done: int
    total: int
    name: str


ProgressCallback = Callable[[CatalogProgress], Any]


@contextmanager
def tqdm_progress(*, desc: str = "Geocoding stations", file: Any = None) -> Iterator[ProgressCallback]:
    """Yield a callback that drives a tqdm bar, closing the bar on exit.

    Raises:
        ImportError: If tqdm is not installed.
    """
    try:
        from tqdm.auto import tqdm  # type: ignore[import-not-found]
    except ImportError:
        msg = "tqdm is required for on_progress='tqdm'. Install it with: pip install mymeteo[progress]"
        raise ImportError(msg) from None

    bar = tqdm(total=0, desc=desc, unit="stn", file=file)

    def _callback(event: CatalogProgress) -> None:
        bar.total = event.total
        bar.n = event.done
        bar.set_postfix_str(event.name, refresh=False)
        bar.refresh()

    try:
        yield _callback
    finally:
        bar.close()


@contextmanager
def progress_callback(on_progress: ProgressCallback | str | None) -> Iterator[ProgressCallback | None]:
    """Turn an ``on_progress`` option into a callback for the build loop.

    Raises:
        ValueError: If *on_progress* is a string other than ``"tqdm"``.
    """
    if on_progress == "tqdm":
        with tqdm_progress() as cb:
            yield cb
    elif isinstance(on_progress, str):
        msg = f"on_progress must be 'tqdm', a callable, or None -- got {on_progress!r}"
        raise ValueError(msg)
    else:
        yield on_progress
