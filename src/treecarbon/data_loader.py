"""
Reference table reader for treecarbon.

Reads the growth coefficient and biomass density tables from delimited text
into typed records. Column positions come from cfg/table_layouts.yaml.

Parsing rules:
- the first row is a header and is skipped
- quoted fields may contain commas
- malformed or missing required numbers (a, b, density) parse to 0
- empty optional coefficients (c, d, e) stay None; an empty mse is 0
"""
import io
from os import PathLike
from pathlib import Path
from typing import IO, Callable, Dict, List, NamedTuple, Optional, Union

import numpy as np
import pandas as pd

from .config_loader import get_table_layout
from .exceptions import InvalidDataError, MissingColumnsError
from .logging_config import get_logger
from .records import BiomassDensityRecord, GrowthCoefficientRecord

__all__ = [
    'ReferenceTables',
    'read_table',
    'parse_growth_coefficients',
    'parse_biomass_density',
    'load_growth_coefficients',
    'load_biomass_density',
    'load_growth_coefficients_text',
    'load_biomass_density_text',
    'load_reference_tables',
]

logger = get_logger(__name__)

Source = Union[str, PathLike, IO[str]]


class ReferenceTables(NamedTuple):
    """Both reference tables, ready to pass to the forecasting engine."""
    coefficients: List[GrowthCoefficientRecord]
    densities: List[BiomassDensityRecord]


def read_table(source: Source) -> pd.DataFrame:
    """Read a delimited-text table with every cell as a string.

    Args:
        source: File path or open text stream

    Returns:
        DataFrame with positional integer columns and the header row removed.
        Empty cells are empty strings.

    Raises:
        InvalidDataError: If the source cannot be read or parsed
    """
    try:
        frame = pd.read_csv(
            source,
            header=None,
            skiprows=1,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidDataError("reference table", f"parsing error: {str(e)}") from e
    except OSError as e:
        raise InvalidDataError("reference table", f"cannot read {source}: {str(e)}") from e

    # Short rows are padded with NaN
    return frame.fillna("").apply(lambda col: col.astype(str).str.strip())


def _check_columns(frame: pd.DataFrame, table: str, layout: Dict[str, int],
                   required: List[str]) -> None:
    needed = max(layout[name] for name in required) + 1
    if not frame.empty and frame.shape[1] < needed:
        raise MissingColumnsError(table, needed, frame.shape[1])


def _column(frame: pd.DataFrame, position: Optional[int]) -> pd.Series:
    """Get a column by position, or empty strings if the row is too short."""
    if position is None or position >= frame.shape[1]:
        return pd.Series([""] * len(frame), index=frame.index, dtype=object)
    return frame.iloc[:, position]


def _numbers(column: pd.Series) -> pd.Series:
    """Parse a text column to floats; unparseable cells become NaN."""
    return pd.to_numeric(column, errors='coerce')


def _or_zero(value: float) -> float:
    return 0.0 if np.isnan(value) else float(value)


def _or_none(text: str, value: float) -> Optional[float]:
    if not text:
        return None
    return _or_zero(value)


def parse_growth_coefficients(frame: pd.DataFrame,
                              layout: Optional[Dict[str, int]] = None
                              ) -> List[GrowthCoefficientRecord]:
    """Map growth coefficient table rows into records.

    Args:
        frame: Table as returned by read_table
        layout: Column positions; defaults to the configured layout

    Returns:
        GrowthCoefficientRecord list in table order
    """
    if frame.empty:
        return []
    if layout is None:
        layout = get_table_layout('growth_coefficients')
    _check_columns(frame, 'growth_coefficients', layout,
                   ['scientific_name', 'independent_variable', 'dependent_variable',
                    'equation_form', 'a', 'b'])

    text = {name: _column(frame, layout.get(name)) for name in
            ['region', 'scientific_name', 'species_code', 'independent_variable',
             'dependent_variable', 'equation_form', 'c', 'd', 'e', 'mse']}
    values = {name: _numbers(_column(frame, layout.get(name)))
              for name in ['a', 'b', 'c', 'd', 'e', 'mse']}

    records = []
    for i in range(len(frame)):
        mse_text = text['mse'].iat[i]
        records.append(GrowthCoefficientRecord(
            region=text['region'].iat[i],
            scientific_name=text['scientific_name'].iat[i],
            species_code=text['species_code'].iat[i],
            independent_variable=text['independent_variable'].iat[i],
            dependent_variable=text['dependent_variable'].iat[i],
            equation_form=text['equation_form'].iat[i],
            a=_or_zero(values['a'].iat[i]),
            b=_or_zero(values['b'].iat[i]),
            c=_or_none(text['c'].iat[i], values['c'].iat[i]),
            d=_or_none(text['d'].iat[i], values['d'].iat[i]),
            e=_or_none(text['e'].iat[i], values['e'].iat[i]),
            mse=_or_zero(values['mse'].iat[i]) if mse_text else 0.0,
        ))
    return records


def parse_biomass_density(frame: pd.DataFrame,
                          layout: Optional[Dict[str, int]] = None
                          ) -> List[BiomassDensityRecord]:
    """Map biomass density table rows into records.

    Args:
        frame: Table as returned by read_table
        layout: Column positions; defaults to the configured layout

    Returns:
        BiomassDensityRecord list in table order
    """
    if frame.empty:
        return []
    if layout is None:
        layout = get_table_layout('biomass_density')
    _check_columns(frame, 'biomass_density', layout,
                   ['scientific_name', 'common_name', 'density'])

    codes = _column(frame, layout.get('species_code'))
    scientific = _column(frame, layout.get('scientific_name'))
    common = _column(frame, layout.get('common_name'))
    density = _numbers(_column(frame, layout.get('density')))

    return [
        BiomassDensityRecord(
            species_code=codes.iat[i],
            scientific_name=scientific.iat[i],
            common_name=common.iat[i],
            density=_or_zero(density.iat[i]),
        )
        for i in range(len(frame))
    ]


def _load(source: Source, parser: Callable[[pd.DataFrame], list], table: str) -> list:
    records = parser(read_table(source))
    name = source if isinstance(source, (str, Path)) else type(source).__name__
    logger.info(f"Loaded {len(records)} {table} records from {name}")
    return records


def load_growth_coefficients(source: Source) -> List[GrowthCoefficientRecord]:
    """Load the growth coefficient table from a file path or text stream."""
    return _load(source, parse_growth_coefficients, 'growth coefficient')


def load_biomass_density(source: Source) -> List[BiomassDensityRecord]:
    """Load the biomass density table from a file path or text stream."""
    return _load(source, parse_biomass_density, 'biomass density')


def load_growth_coefficients_text(csv_text: str) -> List[GrowthCoefficientRecord]:
    """Parse growth coefficient records from CSV text."""
    return load_growth_coefficients(io.StringIO(csv_text.strip()))


def load_biomass_density_text(csv_text: str) -> List[BiomassDensityRecord]:
    """Parse biomass density records from CSV text."""
    return load_biomass_density(io.StringIO(csv_text.strip()))


def load_reference_tables(coefficient_source: Source, density_source: Source) -> ReferenceTables:
    """Load both reference tables.

    Args:
        coefficient_source: Growth coefficient table path or stream
        density_source: Biomass density table path or stream

    Returns:
        ReferenceTables(coefficients, densities)
    """
    return ReferenceTables(
        coefficients=load_growth_coefficients(coefficient_source),
        densities=load_biomass_density(density_source),
    )
