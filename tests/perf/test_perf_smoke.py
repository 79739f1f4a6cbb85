from __future__ import annotations

import time

from atlas_mapper.coords.normalizer import CoordinateCache
from atlas_mapper.services.materializer import MaterializeOptions, materialize

"""Performance smoke test for a synthetic atlas index.
Lenient bound so CI stays green on slow runners.
"""

ROWS = 5_000


def _rows() -> list[dict[str, str]]:
    rows = []
    for i in range(ROWS):
        coords = f"{i % 89}-{i % 60}N/{i % 179}-{(i * 7) % 60}E"
        if i % 10 == 0:
            coords += f"+{i % 45}-0S/{i % 90}-30W"
        if i % 97 == 0:
            coords = "??"
        rows.append({"Name": f"Place {i}", "Category": f"Cat {i % 7}", "Coordinates": coords})
    return rows


def test_materialize_throughput_smoke():
    rows = _rows()
    cache = CoordinateCache()
    start = time.perf_counter()
    result = materialize(rows, options=MaterializeOptions(chunk_size=500, show_progress=False), cache=cache)
    elapsed = time.perf_counter() - start
    assert result.ok
    assert result.stats.chunks == 10
    assert result.stats.rows_skipped == len(range(0, ROWS, 97))
    assert len(result.points) > ROWS
    # extremely lenient: pure-Python parsing of 5k rows should take well under this
    assert elapsed < 10.0, f"materialize too slow: {elapsed:.3f}s"


def test_cache_makes_second_pass_hit():
    rows = _rows()
    cache = CoordinateCache()
    options = MaterializeOptions(show_progress=False)
    materialize(rows, options=options, cache=cache)
    misses = cache.misses
    materialize(rows, options=options, cache=cache)
    assert cache.misses == misses
