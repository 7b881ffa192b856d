"""
Reconstruction of tables from positioned PDF text.

Text runs are grouped into rows by their vertical position, column starts are
found from x positions that recur across rows, and each run is assigned to
its nearest column.
"""
import logging
import math
from collections import Counter
from typing import List, Optional, Sequence

from config import TableDetectorConfig, VerticalLayoutConfig
from errors import TableDetectionError
from schema import TableRow, TextElement

logger = logging.getLogger(__name__)


def _round_half(x: float) -> float:
    """Round to the nearest 0.5, halves away from zero."""
    return math.copysign(math.floor(abs(x) * 2 + 0.5) / 2, x)


class TableDetector:
    """Detects a horizontal table in a list of TextElements."""

    def __init__(self, config: Optional[TableDetectorConfig] = None):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.config = config or TableDetectorConfig()

    def detect_table(self, elements: Sequence[TextElement]) -> List[TableRow]:
        """
        Build table rows from positioned text.

        Args:
            elements: Text runs with y growing downward

        Returns:
            One TableRow per visual row, each with one cell per column

        Raises:
            TableDetectionError: when too few rows or columns are found
        """
        if not elements:
            raise TableDetectionError("no text elements to analyze")

        rows = self.group_rows(elements)
        if len(rows) < self.config.min_rows:
            raise TableDetectionError(
                f"insufficient rows detected ({len(rows)}), minimum required: {self.config.min_rows}")

        boundaries = self.detect_column_boundaries(rows)
        if len(boundaries) < self.config.min_columns:
            raise TableDetectionError(
                f"insufficient columns detected ({len(boundaries)}), "
                f"minimum required: {self.config.min_columns}")

        table = self.align_cells(rows, boundaries)
        self.logger.info(f"Detected table with {len(table)} rows and {len(boundaries)} columns")
        return table

    def group_rows(self, elements: Sequence[TextElement]) -> List[List[TextElement]]:
        rows: List[List[TextElement]] = []
        current: List[TextElement] = []
        current_y = 0.0

        for element in sorted(elements, key=lambda e: e.y):
            # Compared with the first element of the row, so long rows do not drift
            if current and abs(element.y - current_y) <= self.config.y_tolerance:
                current.append(element)
                continue
            if current:
                rows.append(current)
            current = [element]
            current_y = element.y
        if current:
            rows.append(current)

        return [sorted(row, key=lambda e: e.x) for row in rows]

    def detect_column_boundaries(self, rows: List[List[TextElement]]) -> List[float]:
        frequencies = Counter(_round_half(e.x) for row in rows for e in row)
        # A column start must recur in at least a quarter of the rows
        min_frequency = len(rows) // 4
        return sorted(x for x, count in frequencies.items() if count >= min_frequency)

    def align_cells(self, rows: List[List[TextElement]], boundaries: List[float]) -> List[TableRow]:
        table = []
        for row in rows:
            if not row:
                continue
            parts: List[List[str]] = [[] for _ in boundaries]
            for element in row:
                index = self.find_column_index(element.x, boundaries)
                if index >= 0:
                    parts[index].append(element.text)

            table.append(TableRow(
                y=sum(e.y for e in row) / len(row),
                cells=[" ".join(p).strip() for p in parts],
                cell_bounds=list(boundaries),
            ))
        return table

    def find_column_index(self, x: float, boundaries: List[float]) -> int:
        if not boundaries:
            return -1
        index = min(range(len(boundaries)), key=lambda i: abs(x - boundaries[i]))
        if abs(x - boundaries[index]) > self.config.max_cell_distance:
            return -1
        return index

    def find_header_row(self, rows: Sequence[TableRow]) -> int:
        """Index of the row that looks most like a header, or -1 when there are no rows."""
        if not rows:
            return -1

        best_score, header_index = 0, -1
        for i, row in enumerate(rows):
            text = " ".join(row.cells).lower()
            score = sum(1 for keyword in self.config.header_keywords if keyword in text)
            if score > best_score:
                best_score, header_index = score, i
        if best_score >= 2:
            return header_index

        # No keyword evidence: take the first fullest row
        most_cells = 0
        for i, row in enumerate(rows):
            filled = sum(1 for cell in row.cells if cell)
            if filled > most_cells:
                most_cells, header_index = filled, i
        return header_index


def detect_vertical_table(elements: Sequence[TextElement],
                          config: Optional[VerticalLayoutConfig] = None) -> List[TableRow]:
    """
    Treat each text column as one transaction.

    Some statements print one transaction per column rather than per row.
    Elements are clustered by x; each cluster becomes a TableRow whose cells
    run top to bottom and whose y holds the cluster's x position.
    """
    config = config or VerticalLayoutConfig()
    clusters: List[List[TextElement]] = []

    for element in elements:
        for cluster in clusters:
            if abs(cluster[0].x - element.x) <= config.x_tolerance:
                cluster.append(element)
                break
        else:
            clusters.append([element])

    if len(clusters) < config.min_columns:
        raise TableDetectionError(
            f"insufficient columns for vertical layout: found {len(clusters)}, "
            f"need at least {config.min_columns}")

    rows = []
    for cluster in sorted(clusters, key=lambda c: c[0].x):
        cells = [e.text for e in sorted(cluster, key=lambda e: e.y) if e.text]
        if cells:
            rows.append(TableRow(y=cluster[0].x, cells=cells, cell_bounds=[cluster[0].x]))
    logger.debug(f"Vertical layout produced {len(rows)} columns")
    return rows
