"""
Column Mapper for query result exports
Applies predicted SELECT column names to tabular data and checks existing headers against them
"""
import io
import math
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from columnlens.column_analyzer import DebugLogger, SQLQueryAnalyzer


class ColumnMappingError(ValueError):
    """The data does not have the shape the query predicts."""


class ColumnMapper:
    """Maps the predicted result columns of a query onto a DataFrame"""

    def __init__(self, analyzer: Optional[SQLQueryAnalyzer] = None):
        self.analyzer = analyzer or SQLQueryAnalyzer()

    def read_csv(self, content: bytes, has_header: bool = False) -> pd.DataFrame:
        """Load CSV bytes; a headerless export gets positional column labels"""
        return pd.read_csv(io.BytesIO(content), header=0 if has_header else None)

    def label_frame(self, df: pd.DataFrame, query: str) -> pd.DataFrame:
        """
        Return a copy of ``df`` whose columns carry the names ``query`` would produce

        Raises:
            ColumnMappingError: the frame width differs from the predicted column count
        """
        names = self.analyzer.analyze_query(query)
        if len(df.columns) != len(names):
            raise ColumnMappingError(
                f"Query predicts {len(names)} columns but the data has {len(df.columns)}"
            )

        labeled = df.copy()
        labeled.columns = names
        DebugLogger.log("Labeled {} rows with columns {}", len(labeled), names)
        return labeled

    def compare_columns(self, predicted: List[str], actual: List[str]) -> Dict[str, Any]:
        """
        Compare predicted column names with an actual header.

        Matching is case-insensitive, and a ``table.column`` header also
        matches a prediction of ``column``.

        Returns:
            Dictionary with matches, matched, missing and extra
        """
        actual = [str(col) for col in actual]
        actual_lower_map = {col.lower(): col for col in actual}
        suffix_map: Dict[str, List[str]] = {}
        for col in actual:
            if '.' in col:
                suffix_map.setdefault(col.split('.')[-1].lower(), []).append(col)

        matched = []
        missing = []
        seen = set()
        for name in predicted:
            name_lower = name.lower()
            candidates = []
            if name_lower in actual_lower_map:
                candidates = [actual_lower_map[name_lower]]
            elif name_lower in suffix_map:
                candidates = suffix_map[name_lower]

            hit = next((col for col in candidates if col not in seen), None)
            if hit is None:
                missing.append(name)
            else:
                matched.append(hit)
                seen.add(hit)

        extra = [col for col in actual if col not in seen]
        DebugLogger.log("Compared columns {} -> missing {}, extra {}", predicted, missing, extra)
        return {
            'matches': not missing and not extra,
            'matched': matched,
            'missing': missing,
            'extra': extra,
        }

    def frame_to_table_dict(self, df: pd.DataFrame, name: str) -> Dict[str, Any]:
        """Convert DataFrame to table dictionary for JSON serialization."""
        if df is None or df.empty:
            return {
                'name': name,
                'columns': [] if df is None else [str(col) for col in df.columns],
                'data': [],
                'row_count': 0
            }

        # Rows stay positional so duplicate column names keep their values
        rows = clean_for_json(df.astype(object).values.tolist())
        return {
            'name': name,
            'columns': [str(col) for col in df.columns],
            'data': rows,
            'row_count': len(df)
        }


def clean_for_json(obj: Any):
    """Recursively clean NaN/inf values and convert numpy types to Python types for JSON serialization."""
    if isinstance(obj, dict):
        return {k: clean_for_json(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [clean_for_json(item) for item in obj]

    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.bool_):
        return bool(obj)
    if isinstance(obj, (float, np.floating)):
        if math.isnan(obj) or math.isinf(obj):
            return None
        return float(obj)
    if obj is pd.NaT or obj is pd.NA:
        return None

    return obj
