"""Tests for reading the reference tables from delimited text."""
import io
import pytest

from treecarbon.data_loader import (
    load_biomass_density,
    load_biomass_density_text,
    load_growth_coefficients,
    load_growth_coefficients_text,
    load_reference_tables,
    parse_growth_coefficients,
    read_table,
)
from treecarbon.exceptions import InvalidDataError, MissingColumnsError
from treecarbon.growth_simulator import forecast


GROWTH_CSV = """\
Region,ScientificName,SpCode,IndependentVar,DependentVar,Notes,Units,EqName,a,b,c,d,e,n,R2,mse
NoEast,Acer rubrum,ACRU,dbh,age,"fitted, urban",cm,lin,1,1.5,,,,40,0.81,
NoEast,Acer rubrum,ACRU,age,dbh,,years,quad,-1,0.8,0.001,,,40,0.77,0.02
NoEast,Acer rubrum,ACRU,dbh,tree ht,,cm,loglogw1,0.9,1.1,,,,40,0.70,0.035
NoEast,Quercus alba,QUAL,dbh,height,,cm,cub,abc,0.6,-0.004,0.00001,2.5,33,0.65,n/a
"""

DENSITY_CSV = """\
SpCode,ScientificName,CommonName,Density
ACRU,Acer rubrum,Red maple,490
QUAL,Quercus alba,"Oak, white",600
ULAM,Ulmus americana,American elm,
"""


class TestReadTable:
    """Tests for the raw table reader."""

    def test_header_skipped(self):
        frame = read_table(io.StringIO(DENSITY_CSV))
        assert len(frame) == 3
        assert frame.iloc[0, 1] == "Acer rubrum"

    def test_quoted_commas(self):
        frame = read_table(io.StringIO(DENSITY_CSV))
        assert frame.iloc[1, 2] == "Oak, white"

    def test_empty_cells_are_empty_strings(self):
        frame = read_table(io.StringIO(DENSITY_CSV))
        assert frame.iloc[2, 3] == ""

    def test_header_only(self):
        frame = read_table(io.StringIO("a,b,c\n"))
        assert frame.empty

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidDataError):
            read_table(tmp_path / "missing.csv")


class TestGrowthCoefficients:
    """Tests for growth coefficient parsing."""

    def test_fields_mapped_by_position(self):
        records = load_growth_coefficients_text(GROWTH_CSV)
        assert len(records) == 4
        first = records[0]
        assert first.region == "NoEast"
        assert first.scientific_name == "Acer rubrum"
        assert first.species_code == "ACRU"
        assert first.independent_variable == "dbh"
        assert first.dependent_variable == "age"
        assert first.equation_form == "lin"
        assert (first.a, first.b) == (1.0, 1.5)

    def test_optional_coefficients(self):
        records = load_growth_coefficients_text(GROWTH_CSV)
        assert records[0].c is None
        assert records[0].d is None
        assert records[1].c == pytest.approx(0.001)
        assert records[3].e == pytest.approx(2.5)

    def test_mse(self):
        records = load_growth_coefficients_text(GROWTH_CSV)
        assert records[0].mse == 0.0
        assert records[2].mse == pytest.approx(0.035)

    def test_malformed_numbers_parse_to_zero(self):
        records = load_growth_coefficients_text(GROWTH_CSV)
        assert records[3].a == 0.0
        assert records[3].mse == 0.0

    def test_table_order_preserved(self):
        records = load_growth_coefficients_text(GROWTH_CSV)
        assert [r.dependent_variable for r in records] == ['age', 'dbh', 'tree ht', 'height']

    def test_custom_layout(self):
        csv = "name,form,x,y\nPopulus,lin,2,3\n"
        frame = read_table(io.StringIO(csv))
        layout = {'scientific_name': 0, 'equation_form': 1, 'a': 2, 'b': 3,
                  'independent_variable': 0, 'dependent_variable': 0}
        records = parse_growth_coefficients(frame, layout)
        assert records[0].scientific_name == "Populus"
        assert records[0].region == ""
        assert (records[0].a, records[0].b) == (2.0, 3.0)

    def test_too_few_columns(self):
        with pytest.raises(MissingColumnsError):
            load_growth_coefficients_text("a,b,c\n1,2,3\n")


class TestBiomassDensity:
    """Tests for density parsing."""

    def test_fields(self):
        records = load_biomass_density_text(DENSITY_CSV)
        assert records[0].species_code == "ACRU"
        assert records[0].common_name == "Red maple"
        assert records[0].density == 490.0

    def test_missing_density_is_zero(self):
        records = load_biomass_density_text(DENSITY_CSV)
        assert records[2].density == 0.0

    def test_too_few_columns(self):
        with pytest.raises(MissingColumnsError):
            load_biomass_density_text("code,name\nACRU,Acer rubrum\n")

    def test_empty_table(self):
        assert load_biomass_density_text("SpCode,ScientificName,CommonName,Density\n") == []


class TestLoadReferenceTables:
    """Loading both tables from files and forecasting with them."""

    def test_load_from_files(self, tmp_path):
        growth_file = tmp_path / "TS6_Growth_coefficients.csv"
        density_file = tmp_path / "TS9_Biomass_density_factors.csv"
        growth_file.write_text(GROWTH_CSV, encoding="utf-8")
        density_file.write_text(DENSITY_CSV, encoding="utf-8")

        tables = load_reference_tables(growth_file, density_file)
        assert len(tables.coefficients) == 4
        assert len(tables.densities) == 3

        result = forecast("Red maple", 20.0, 10, tables.densities, tables.coefficients)
        assert len(result.series) == 11
        assert result.resolved.density == 490.0

    def test_individual_loaders_accept_paths(self, tmp_path):
        density_file = tmp_path / "density.csv"
        density_file.write_text(DENSITY_CSV, encoding="utf-8")
        assert len(load_biomass_density(density_file)) == 3
        assert len(load_biomass_density(str(density_file))) == 3

    def test_loader_accepts_stream(self):
        assert len(load_growth_coefficients(io.StringIO(GROWTH_CSV))) == 4
