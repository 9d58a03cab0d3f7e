from __future__ import annotations

from ..models.operation_result import ReinitResult

"""SUMMARY line rendering.

Format:
SUMMARY status={status} input={geometry} output={dbf} features={N}
rows={rows} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    # Avoid scientific notation for very small values
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ReinitResult) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> result = ReinitResult(
        ...     geometry_path="roads.shp", attribute_path="roads.dbf",
        ...     feature_count=3, rows_written=3, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY status=success input=roads.shp output=roads.dbf features=3 rows=3 elapsed_sec=2'
    """
    return (
        f"SUMMARY status={result.status} "
        f"input={result.geometry_path or '-'} "
        f"output={result.attribute_path or '-'} "
        f"features={result.feature_count} "
        f"rows={result.rows_written} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )
