"""
Metric Observation Ingestion Service

Loads metric observations into the MetricStore from CSV uploads or JSON
batches, with schema validation before anything is written.

CSV layout (header names are case-insensitive):
    metric,value,region,function,timestamp
    inflation_rate,7.2,EMEA,,2024-11-01T00:00:00Z
    ai_wage_growth,28,APAC,AI,2024-11-01T00:00:00Z

Key Features:
- Required column validation (function is optional)
- Numeric value and timestamp parsing with per-column error reports
- Blank metric/region detection
- Naive timestamps are read as UTC
- Nothing is written unless the whole file validates
"""

import io
import logging
from typing import Any, BinaryIO, List, Optional, Sequence, Tuple, Union

import pandas as pd

from labor_insights.core.exceptions import StoreUnavailable
from labor_insights.models import IngestionResult, MetricObservation, ValidationError
from labor_insights.services.metric_store import MetricStore

logger = logging.getLogger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

OBSERVATION_REQUIRED_COLUMNS: List[str] = [
    'metric',
    'value',
    'region',
    'timestamp',
]

OBSERVATION_OPTIONAL_COLUMNS: List[str] = ['function']

TEXT_COLUMNS: List[str] = ['metric', 'region']

# How many offending row numbers an error message lists
MAX_REPORTED_ROWS: int = 5


def _row_numbers(mask: pd.Series) -> List[int]:
    # 0-based DataFrame index to 1-based data row number
    return [int(index) + 1 for index in mask[mask].index.tolist()[:MAX_REPORTED_ROWS]]


def _lowercase_columns(df: pd.DataFrame) -> pd.DataFrame:
    df_lower = df.copy()
    df_lower.columns = df_lower.columns.str.lower().str.strip()
    return df_lower


def _parse_timestamps(series: pd.Series) -> pd.Series:
    return pd.to_datetime(series, utc=True, errors='coerce', format='mixed')


# =============================================================================
# VALIDATION FUNCTIONS
# =============================================================================


def validate_columns(df: pd.DataFrame) -> List[ValidationError]:
    """
    Validate that all required observation columns are present.

    Args:
        df: The pandas DataFrame to validate

    Returns:
        List of ValidationError objects for any missing columns
    """
    errors: List[ValidationError] = []
    df_columns = set(df.columns.str.lower().str.strip())

    for col in OBSERVATION_REQUIRED_COLUMNS:
        if col not in df_columns:
            errors.append(ValidationError(
                field=col,
                message=f"Required column '{col}' is missing",
            ))

    return errors


def validate_data_types(df: pd.DataFrame) -> List[ValidationError]:
    """
    Validate that values are numeric and timestamps are parseable.

    Args:
        df: The pandas DataFrame to validate (required columns present)

    Returns:
        List of ValidationError objects, at most one per column
    """
    errors: List[ValidationError] = []
    df_lower = _lowercase_columns(df)

    values = pd.to_numeric(df_lower['value'], errors='coerce')
    invalid_mask = values.isna()
    if invalid_mask.any():
        rows = _row_numbers(invalid_mask)
        errors.append(ValidationError(
            field='value',
            message=f"Found {int(invalid_mask.sum())} missing or non-numeric values. First invalid rows: {rows}",
            rowNumber=rows[0],
        ))

    timestamps = _parse_timestamps(df_lower['timestamp'])
    invalid_mask = timestamps.isna()
    if invalid_mask.any():
        rows = _row_numbers(invalid_mask)
        errors.append(ValidationError(
            field='timestamp',
            message=f"Found {int(invalid_mask.sum())} missing or invalid timestamps. First invalid rows: {rows}",
            rowNumber=rows[0],
        ))

    return errors


def validate_required_values(df: pd.DataFrame) -> List[ValidationError]:
    """Validate that metric and region are never blank."""
    errors: List[ValidationError] = []
    df_lower = _lowercase_columns(df)

    for col in TEXT_COLUMNS:
        blank_mask = df_lower[col].isna() | (df_lower[col].astype(str).str.strip() == '')
        if blank_mask.any():
            rows = _row_numbers(blank_mask)
            errors.append(ValidationError(
                field=col,
                message=f"Found {int(blank_mask.sum())} blank '{col}' values. First invalid rows: {rows}",
                rowNumber=rows[0],
            ))

    return errors


def _normalize_dataframe(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize column names and coerce types for conversion.

    Args:
        df: Validated input DataFrame

    Returns:
        DataFrame with lowercase columns, float values, UTC timestamps and a
        function column (blank cells are cleaned in dataframe_to_observations)
    """
    df_normalized = _lowercase_columns(df)

    df_normalized['value'] = pd.to_numeric(df_normalized['value'], errors='coerce')
    df_normalized['timestamp'] = _parse_timestamps(df_normalized['timestamp'])
    for col in TEXT_COLUMNS:
        df_normalized[col] = df_normalized[col].astype(str).str.strip()

    if 'function' not in df_normalized.columns:
        df_normalized['function'] = None

    return df_normalized


# =============================================================================
# PARSING FUNCTIONS
# =============================================================================


def parse_observation_csv(
    file: Union[BinaryIO, Any]
) -> Tuple[Optional[pd.DataFrame], List[ValidationError]]:
    """
    Parse and validate a CSV file of metric observations.

    Steps:
    1. Parse CSV using pandas
    2. Validate required columns
    3. Validate values, timestamps and blank text fields
    4. Normalize

    Args:
        file: File object (binary or text) or path containing CSV data

    Returns:
        Tuple of (normalized DataFrame or None, list of validation errors)
    """
    errors: List[ValidationError] = []

    try:
        if hasattr(file, 'read'):
            content = file.read()
            if isinstance(content, bytes):
                file_like = io.BytesIO(content)
            else:
                file_like = io.StringIO(content)
        else:
            file_like = file

        # Only empty cells are missing; 'NA' is the North America region code
        df = pd.read_csv(file_like, keep_default_na=False, na_values=[''])

        if df.empty:
            errors.append(ValidationError(
                field='file',
                message='CSV file is empty or contains no data rows',
            ))
            return None, errors

        logger.info(f"Parsed CSV with {len(df)} rows and {len(df.columns)} columns")

    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        errors.append(ValidationError(
            field='file',
            message=f'Failed to parse CSV file: {str(e)}',
        ))
        return None, errors

    column_errors = validate_columns(df)
    if column_errors:
        return None, column_errors

    errors.extend(validate_data_types(df))
    errors.extend(validate_required_values(df))
    if errors:
        return None, errors

    return _normalize_dataframe(df), errors


def _clean_function(value: Any) -> Optional[str]:
    """Blank or missing function cells mean the observation covers all functions."""
    if value is None or pd.isna(value):
        return None
    return str(value).strip() or None


def dataframe_to_observations(df: pd.DataFrame) -> List[MetricObservation]:
    """Convert a normalized observation DataFrame into MetricObservation records."""
    observations: List[MetricObservation] = []
    for row in df.itertuples(index=False):
        observations.append(MetricObservation(
            metric=row.metric,
            value=float(row.value),
            region=row.region,
            function=_clean_function(row.function),
            timestamp=row.timestamp.to_pydatetime(),
        ))
    return observations


# =============================================================================
# INGESTION ENTRY POINTS
# =============================================================================


async def ingest_observations(
    store: MetricStore,
    observations: Sequence[MetricObservation],
) -> IngestionResult:
    """
    Write an already-validated batch of observations to the store.

    Store failures are reported in the result, not raised.
    """
    rows_processed = len(observations)
    if not observations:
        return IngestionResult(success=True, rowsProcessed=0, rowsAffected=0)

    try:
        rows_affected = await store.insert(observations)
    except StoreUnavailable as e:
        logger.error(f"Observation ingestion failed: {e}")
        return IngestionResult(
            success=False,
            rowsProcessed=rows_processed,
            rowsAffected=0,
            errors=[ValidationError(field='store', message=str(e))],
        )

    logger.info(f"Ingestion complete: {rows_processed} rows processed, {rows_affected} rows affected")
    return IngestionResult(
        success=True,
        rowsProcessed=rows_processed,
        rowsAffected=rows_affected,
    )


async def ingest_csv(store: MetricStore, file: Union[BinaryIO, Any]) -> IngestionResult:
    """
    Parse, validate and store a CSV file of observations.

    Args:
        store: Destination MetricStore
        file: CSV file object or path

    Returns:
        IngestionResult with success status, row counts, and any errors
    """
    df, errors = parse_observation_csv(file)
    if errors or df is None:
        logger.warning(f"CSV ingestion rejected with {len(errors)} validation errors")
        return IngestionResult(
            success=False,
            rowsProcessed=0,
            rowsAffected=0,
            errors=errors,
        )

    return await ingest_observations(store, dataframe_to_observations(df))
