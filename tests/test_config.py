"""Tests for configuration readers and subcatchment builders."""

from dataclasses import replace

import pytest
from pydantic import ValidationError
from pyrunoff import (
    ConfigurationError,
    ErrorCategory,
    ObjectNames,
    RouteTo,
    RunoffOptions,
    SubareaConfig,
    SubareaType,
    SubcatchmentConfig,
    build_subcatchments,
    read_init_buildup,
    read_landuse_params,
    read_subarea_params,
    read_subcatch_params,
)
from pyrunoff.config import make_subareas
from pyrunoff.constants import FT2PERACRE, ODETOL


@pytest.fixture
def names() -> ObjectNames:
    return ObjectNames(
        subcatchments={"S1": 0, "S2": 1},
        gages={"RG1": 0},
        nodes={"J1": 0, "S2": 1},
        snowpacks={"SP1": 0},
        landuses={"Residential": 0, "Commercial": 1},
        pollutants={"TSS": 0, "Lead": 1},
    )


class TestRunoffOptions:
    def test_defaults(self) -> None:
        options = RunoffOptions()
        assert options.ode_tolerance == ODETOL
        assert not options.ignore_quality

    def test_tolerance_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            RunoffOptions(ode_tolerance=0.0)


class TestReadSubcatchParams:
    """Tests for read_subcatch_params."""

    def test_valid_row(self, names) -> None:
        config = read_subcatch_params("S1 RG1 J1 5.0 40 500 0.5 0 SP1".split(), names)
        assert config.gage == "RG1"
        assert config.out_node == "J1"
        assert config.out_subcatch is None
        assert config.area == 5.0
        assert config.snowpack == "SP1"

    def test_no_gage(self, names) -> None:
        assert read_subcatch_params("S1 * J1 5 40 500 0.5 0".split(), names).gage is None

    def test_subcatchment_outlet(self, names) -> None:
        config = read_subcatch_params("S1 RG1 S1 5 40 500 0.5 0".split(), names)
        assert config.out_subcatch == "S1"
        assert config.out_node is None

    def test_too_few_items(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_subcatch_params("S1 RG1 J1 5".split(), names)
        assert exc_info.value.category is ErrorCategory.TOO_FEW_ITEMS

    def test_unknown_gage(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_subcatch_params("S1 RG9 J1 5 40 500 0.5 0".split(), names)
        assert exc_info.value.category is ErrorCategory.MISSING_OBJECT
        assert exc_info.value.token == "RG9"

    def test_bad_number(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_subcatch_params("S1 RG1 J1 five 40 500 0.5 0".split(), names)
        assert exc_info.value.category is ErrorCategory.BAD_NUMBER

    def test_zero_area(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_subcatch_params("S1 RG1 J1 0 50 100 1 0".split(), names)
        assert exc_info.value.category is ErrorCategory.BAD_NUMBER
        assert exc_info.value.token == "0"

    def test_zero_area_rejected_by_model(self) -> None:
        with pytest.raises(ValidationError):
            SubcatchmentConfig(name="S1", out_node="J1", area=0.0, pct_imperv=10.0, width=100.0, pct_slope=1.0)

    def test_bad_percent(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_subcatch_params("S1 RG1 J1 5 140 500 0.5 0".split(), names)
        assert exc_info.value.category is ErrorCategory.BAD_PERCENT

    def test_missing_outlet_rejected(self) -> None:
        with pytest.raises(ValidationError, match="no outlet"):
            SubcatchmentConfig(name="S1", area=1.0, pct_imperv=10.0, width=100.0, pct_slope=1.0)


class TestReadOtherRows:
    def test_subarea_row(self, names) -> None:
        config = read_subarea_params("S1 0.01 0.1 0.05 0.2 25 PERVIOUS 60".split(), names)
        assert config.route_to is RouteTo.PERV
        assert config.pct_routed == 60.0

    def test_subarea_default_routed(self, names) -> None:
        assert read_subarea_params("S1 0.01 0.1 0.05 0.2 25 OUTLET".split(), names).pct_routed == 100.0

    def test_subarea_bad_keyword(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_subarea_params("S1 0.01 0.1 0.05 0.2 25 NOWHERE".split(), names)
        assert exc_info.value.category is ErrorCategory.BAD_KEYWORD

    def test_coverage_row(self, names) -> None:
        config = read_landuse_params("S1 Residential 60 Commercial 40".split(), names)
        assert config.percents == {"Residential": 60.0, "Commercial": 40.0}

    def test_coverage_unknown_landuse(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_landuse_params("S1 Industrial 60".split(), names)
        assert exc_info.value.category is ErrorCategory.MISSING_OBJECT

    def test_loading_row(self, names) -> None:
        config = read_init_buildup("S1 TSS 12.5 Lead 0.1".split(), names)
        assert config.loadings == {"TSS": 12.5, "Lead": 0.1}

    def test_loading_missing_value(self, names) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            read_init_buildup("S1 TSS 12.5 Lead".split(), names)
        assert exc_info.value.category is ErrorCategory.TOO_FEW_ITEMS


class TestMakeSubareas:
    """Tests for make_subareas."""

    def test_areas_and_storage(self) -> None:
        config = SubareaConfig(subcatch="S1", n_imperv=0.01, n_perv=0.1, s_imperv=0.06, s_perv=0.12, pct_zero=25.0)
        subareas = make_subareas(0.4, config)

        assert subareas[SubareaType.IMPERV0].f_area == pytest.approx(0.1)
        assert subareas[SubareaType.IMPERV1].f_area == pytest.approx(0.3)
        assert subareas[SubareaType.PERV].f_area == pytest.approx(0.6)
        assert subareas[SubareaType.IMPERV0].d_store == 0.0
        assert subareas[SubareaType.IMPERV1].d_store == pytest.approx(0.005)
        assert subareas[SubareaType.PERV].d_store == pytest.approx(0.01)

    def test_impervious_routed_to_pervious(self) -> None:
        config = SubareaConfig(
            subcatch="S1",
            n_imperv=0.01,
            n_perv=0.1,
            s_imperv=0.05,
            s_perv=0.1,
            pct_zero=25.0,
            route_to="PERV",
            pct_routed=60.0,
        )
        subareas = make_subareas(0.4, config)

        for kind in (SubareaType.IMPERV0, SubareaType.IMPERV1):
            assert subareas[kind].route_to is RouteTo.PERV
            assert subareas[kind].f_outlet == pytest.approx(0.4)
        assert subareas[SubareaType.PERV].route_to is RouteTo.OUTLET
        assert subareas[SubareaType.PERV].f_outlet == 1.0

    def test_routing_forced_to_outlet_when_fully_impervious(self, caplog) -> None:
        config = SubareaConfig(
            subcatch="S1", n_imperv=0.01, n_perv=0.1, s_imperv=0.05, s_perv=0.1, pct_zero=0.0, route_to="IMPERV"
        )
        subareas = make_subareas(1.0, config)

        assert all(s.route_to is RouteTo.OUTLET for s in subareas)
        assert all(s.f_outlet == 1.0 for s in subareas)
        assert "routing" in caplog.text

    def test_unusual_roughness_warns(self, caplog) -> None:
        SubareaConfig(subcatch="S1", n_imperv=0.5, n_perv=0.1, s_imperv=0.05, s_perv=0.1, pct_zero=0.0)
        assert "n_imperv" in caplog.text


class TestBuildSubcatchments:
    """Tests for build_subcatchments."""

    def test_builds_in_index_order(self, names) -> None:
        names = replace(names, nodes={"J1": 0})
        configs = [
            read_subcatch_params("S2 RG1 J1 2 50 400 1 100".split(), names),
            read_subcatch_params("S1 * S2 1 0 200 2 0".split(), names),
        ]
        coverage = read_landuse_params("S2 Commercial 100".split(), names)
        loading = read_init_buildup("S2 TSS 3".split(), names)

        subcatchments = build_subcatchments(configs, names, coverages=[coverage], loadings=[loading])

        s1, s2 = subcatchments
        assert (s1.name, s1.index, s1.out_subcatch, s1.gage) == ("S1", 0, 1, None)
        assert (s2.name, s2.index, s2.out_node, s2.gage) == ("S2", 1, 0, 0)
        assert s2.area == pytest.approx(2.0 * FT2PERACRE)
        assert s2.slope == pytest.approx(0.01)
        assert s2.land_factors[1].fraction == 1.0
        assert s2.init_buildup[0] == 3.0
        assert s2[SubareaType.PERV].f_area == pytest.approx(0.5)

    def test_ambiguous_outlet(self, names) -> None:
        """An outlet name shared by a node and a subcatchment is rejected."""
        configs = [read_subcatch_params("S1 RG1 S2 1 50 200 1 0".split(), names)]

        with pytest.raises(ConfigurationError) as exc_info:
            build_subcatchments(configs, names)
        assert exc_info.value.category is ErrorCategory.AMBIGUOUS_OUTLET

    def test_lid_area_too_large(self, names) -> None:
        config = SubcatchmentConfig(
            name="S1", out_node="J1", area=1.0, pct_imperv=50.0, width=100.0, pct_slope=1.0, lid_area=2.0
        )

        with pytest.raises(ConfigurationError) as exc_info:
            build_subcatchments([config], names)
        assert exc_info.value.category is ErrorCategory.BAD_LID_AREA

    def test_rows_for_unknown_subcatchment(self, names) -> None:
        configs = [read_subcatch_params("S1 RG1 J1 1 50 200 1 0".split(), names)]
        subarea = SubareaConfig(subcatch="S9", n_imperv=0.01, n_perv=0.1, s_imperv=0.05, s_perv=0.1, pct_zero=0.0)

        with pytest.raises(ConfigurationError) as exc_info:
            build_subcatchments(configs, names, subareas=[subarea])
        assert exc_info.value.token == "S9"
