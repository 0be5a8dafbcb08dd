"""Input descriptor tests — what a form builder sees for each calculator."""

from __future__ import annotations

from laser_engine.config import BeamQualityRequest, GasPressureRequest, MultiPassRequest
from laser_engine.engine.schema import describe_inputs


def _by_name(model_cls):
    return {d.name: d for d in describe_inputs(model_cls)}


def test_field_order_preserved():
    names = [d.name for d in describe_inputs(GasPressureRequest)]
    assert names == list(GasPressureRequest.model_fields)


def test_select_input():
    d = _by_name(GasPressureRequest)["material_type"]
    assert d.type == "select"
    assert d.required is True
    assert d.default is None
    assert d.options == ["steel", "stainless_steel", "aluminum", "copper", "titanium", "brass"]


def test_number_input_with_unit_and_bounds():
    d = _by_name(GasPressureRequest)["thickness"]
    assert d.type == "number"
    assert d.unit == "mm"
    assert d.constraints == {"ge": 0.1, "le": 50}
    assert d.description == "Material thickness (mm)"


def test_optional_inputs():
    gas = _by_name(GasPressureRequest)
    assert gas["current_pressure"].required is False
    assert gas["current_pressure"].default is None
    assert gas["current_pressure"].type == "number"
    assert gas["cutting_length"].default == 1000.0

    mp = _by_name(MultiPassRequest)
    assert mp["current_passes"].type == "integer"
    assert mp["current_passes"].constraints == {"ge": 1, "le": 10}


def test_enum_default_reported_by_value():
    d = _by_name(BeamQualityRequest)["assist_gas"]
    assert d.required is False
    assert d.default == "nitrogen"
    assert "argon" in d.options


def test_default_inputs_complete(multi_pass, gas_pressure, beam_quality):
    for calc in (multi_pass, gas_pressure, beam_quality):
        defaults = calc.default_inputs()
        assert set(defaults) == set(calc.request_model.model_fields)
        assert calc.calculate(defaults).ok


def test_default_inputs_values(gas_pressure, beam_quality):
    gas = gas_pressure.default_inputs()
    assert gas["cutting_length"] == 1000.0
    assert gas["current_pressure"] is None
    beam = beam_quality.default_inputs()
    assert beam["assist_gas"] == "nitrogen"
    assert beam["divergence_angle"] == 1.0  # example value wins over the None default


def test_json_schema(gas_pressure):
    schema = gas_pressure.schema()
    assert schema["title"] == "GasPressureRequest"
    assert schema["properties"]["thickness"]["unit"] == "mm"
    assert "material_type" in schema["required"]
