import pytest

from shaderbox.presets import PRESETS, get_preset
from shaderbox.uniforms.discovery import (
    UniformDescriptor,
    default_descriptor,
    discover_uniforms,
    format_declaration,
)


def test_hinted_float():
    source = "uniform float u_zoom; // range: 0.1, 10.0, default: 1.0"

    assert discover_uniforms(source) == [
        UniformDescriptor("u_zoom", "float", 1.0, 0.1, 10.0, 0.01)
    ]


def test_builtins_are_not_reported():
    source = """
uniform vec2 u_resolution;
uniform float u_time;
uniform vec2 u_mouse;
uniform vec3 u_color;
"""

    assert discover_uniforms(source) == [
        UniformDescriptor("u_color", "vec3", (1.0, 1.0, 1.0), 0.0, 1.0, 0.01)
    ]


def test_vector_default_hint():
    source = "uniform vec2 u_center; // range: -2.0, 2.0, default: -0.5, 0.0"

    (descriptor,) = discover_uniforms(source)

    assert descriptor.value == (-0.5, 0.0)
    assert (descriptor.min, descriptor.max, descriptor.step) == (-2.0, 2.0, 0.01)


@pytest.mark.parametrize(
    "type_, name, value, lo, hi, step",
    [
        ("float", "u_a", 0.5, 0.0, 1.0, 0.01),
        ("int", "u_a", 1, 0, 10, 1),
        ("vec2", "u_a", (0.0, 0.0), -1.0, 1.0, 0.01),
        ("vec3", "u_a", (0.0, 0.0, 0.0), -1.0, 1.0, 0.01),
        ("vec3", "u_tintColor", (1.0, 1.0, 1.0), 0.0, 1.0, 0.01),
        ("vec4", "u_a", (0.0, 0.0, 0.0, 1.0), 0.0, 1.0, 0.01),
    ],
)
def test_seed_defaults(type_, name, value, lo, hi, step):
    (descriptor,) = discover_uniforms(f"uniform {type_} {name};")

    assert descriptor == UniformDescriptor(name, type_, value, lo, hi, step)


def test_color_detection_ignores_case():
    assert default_descriptor("vec3", "u_BaseCOLOR").is_color
    assert not default_descriptor("vec4", "u_color").is_color


def test_int_default_rounds_half_up():
    (descriptor,) = discover_uniforms("uniform int u_n; // default: 2.5")

    assert descriptor.value == 3
    assert isinstance(descriptor.value, int)


def test_hints_in_any_order_and_subset():
    (descriptor,) = discover_uniforms(
        "uniform float u_k; // step: 0.25, default: 3.0, range: -5.0, 5.0"
    )

    assert (descriptor.value, descriptor.min, descriptor.max, descriptor.step) == (
        3.0,
        -5.0,
        5.0,
        0.25,
    )

    (only_step,) = discover_uniforms("uniform float u_k; //step: 0.1")
    assert (only_step.value, only_step.min, only_step.max, only_step.step) == (
        0.5,
        0.0,
        1.0,
        0.1,
    )


def test_partial_vector_default_keeps_remaining_seed():
    (descriptor,) = discover_uniforms("uniform vec4 u_tint; // default: 0.2, 0.4")

    assert descriptor.value == (0.2, 0.4, 0.0, 1.0)


def test_unrelated_comment_is_ignored():
    (descriptor,) = discover_uniforms("uniform float u_a; // scales the thing")

    assert descriptor == default_descriptor("float", "u_a")


def test_unsupported_and_malformed_declarations_are_skipped():
    source = """
uniform mat4 u_matrix;
uniform sampler2D u_texture;
uniform float u_weights[4];
uniform float ;
uniform float u_ok;
"""

    assert [d.name for d in discover_uniforms(source)] == ["u_ok"]


def test_order_and_duplicates_are_preserved():
    source = """
uniform float u_b;
uniform vec2 u_a;
uniform float u_b;
"""

    assert [d.name for d in discover_uniforms(source)] == ["u_b", "u_a", "u_b"]


def test_source_without_uniforms():
    assert discover_uniforms("void main() {}") == []
    assert discover_uniforms("") == []


def test_count_matches_declarations_in_presets():
    builtin = {"u_resolution", "u_time", "u_mouse"}

    for preset in PRESETS:
        declared = [
            line.split()[2].rstrip(";")
            for line in preset.source.splitlines()
            if line.startswith("uniform ")
        ]
        expected = [name for name in declared if name not in builtin]
        assert [d.name for d in discover_uniforms(preset.source)] == expected


def test_waves_preset_uniforms():
    descriptors = {d.name: d for d in discover_uniforms(get_preset("waves").source)}

    assert descriptors["u_color"].value == (0.2, 0.6, 1.0)
    assert descriptors["u_color"].is_color
    assert descriptors["u_frequency"].value == (6.0, 3.0)
    assert descriptors["u_frequency"].max == 20.0
    assert descriptors["u_layers"].value == 4
    assert (descriptors["u_layers"].min, descriptors["u_layers"].max) == (1.0, 8.0)


@pytest.mark.parametrize(
    "descriptor",
    [
        UniformDescriptor("u_zoom", "float", 1.25, 0.1, 10.0, 0.05),
        UniformDescriptor("u_count", "int", 7, 1.0, 12.0, 1.0),
        UniformDescriptor("u_center", "vec2", (-0.5, 0.0), -2.0, 2.0, 0.01),
        UniformDescriptor("u_tint", "vec4", (0.1, 0.2, 0.3, 0.4), 0.0, 1.0, 0.001),
    ],
)
def test_formatted_declaration_is_rediscovered(descriptor):
    assert discover_uniforms(format_declaration(descriptor)) == [descriptor]


def test_descriptor_to_dict():
    descriptor = UniformDescriptor("u_center", "vec2", (-0.5, 0.0), -2.0, 2.0, 0.01)

    assert descriptor.to_dict() == {
        "name": "u_center",
        "type": "vec2",
        "value": [-0.5, 0.0],
        "min": -2.0,
        "max": 2.0,
        "step": 0.01,
    }


def test_scan_is_textual():
    # No tokenizing: the keyword is found even glued to other text.
    source = "#define TAGuniform float u_gain; // default: 2.0\n"

    assert [d.name for d in discover_uniforms(source)] == ["u_gain"]
