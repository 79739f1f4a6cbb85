from __future__ import annotations

import re

from atlas_mapper.models.point import NormalizedPoint
from atlas_mapper.services.export import export_csv

"""Export CSV contract: fixed header, every field double-quoted."""

QUOTED_FIELD = r'"(?:[^"]|"")*"'
ROW_PATTERN = re.compile(rf"^{QUOTED_FIELD}(?:,{QUOTED_FIELD}){{4}}$")


def test_export_header_contract():
    header = export_csv([]).splitlines()[0]
    assert header == '"Name","Category","Latitude","Longitude","Original Coordinates"'


def test_every_row_has_five_quoted_fields():
    points = [
        NormalizedPoint("point-0", 1.5, -2.25, "A, the first", "Town", "1-30N/2-15W"),
        NormalizedPoint("point-1", 0.0, 0.0, 'B "quoted"', "Unknown", "0N/0E"),
    ]
    for line in export_csv(points).splitlines():
        assert ROW_PATTERN.match(line), line
