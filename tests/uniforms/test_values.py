import numpy as np
import pytest

from shaderbox.gl.backend import StageKind, UniformBinding
from shaderbox.uniforms.values import UniformValue, push_uniform
from tests.conftest import VALID_SOURCE, FakeGL


@pytest.mark.parametrize(
    "value, type_, data",
    [
        (3, "int", 3),
        (0.25, "float", 0.25),
        ((1, 2), "vec2", (1.0, 2.0)),
        ([0.1, 0.2, 0.3], "vec3", (0.1, 0.2, 0.3)),
        (np.array([1.0, 0.0, 0.0, 1.0]), "vec4", (1.0, 0.0, 0.0, 1.0)),
        (np.float32(2.0), "float", 2.0),
    ],
)
def test_infer(value, type_, data):
    inferred = UniformValue.infer(value)

    assert inferred.type == type_
    assert inferred.data == data


@pytest.mark.parametrize("value", [True, [1.0], [1, 2, 3, 4, 5], [[1, 2], [3, 4]], "red"])
def test_infer_rejects_other_shapes(value):
    with pytest.raises(ValueError):
        UniformValue.infer(value)


def test_scalar_components():
    assert UniformValue.infer(4).components == (4.0,)
    assert UniformValue.infer((1, 2)).components == (1.0, 2.0)


@pytest.fixture
def program_gl():
    gl = FakeGL()
    program = gl.create_program()
    vertex = gl.create_shader(StageKind.VERTEX)
    fragment = gl.create_shader(StageKind.FRAGMENT)
    gl.compile_shader(vertex, "void main() {}")
    gl.compile_shader(fragment, VALID_SOURCE)
    gl.link_program(program, (vertex, fragment))
    gl.use_program(program)
    return gl


def test_push_to_missing_binding_is_a_no_op(program_gl):
    assert not push_uniform(program_gl, None, UniformValue.infer(1.0))
    assert program_gl.writes == {}


def test_push_float(program_gl):
    binding = program_gl.active_uniforms(program_gl.current_program)["u_scale"]

    assert push_uniform(program_gl, binding, UniformValue.infer(2.0))
    assert program_gl.written("u_scale") == 2.0


def test_push_uses_declared_kind(program_gl):
    as_int = UniformBinding("u_layers", 7, "int")
    as_float = UniformBinding("u_scale", 8, "float")

    assert push_uniform(program_gl, as_int, UniformValue.infer(2.6))
    assert push_uniform(program_gl, as_float, UniformValue.infer(3))

    current = program_gl.current_program
    assert program_gl.writes[(current, 7)] == 3
    assert program_gl.writes[(current, 8)] == 3.0


def test_push_skips_component_mismatch(program_gl):
    binding = UniformBinding("u_color", 3, "vec3")

    assert not push_uniform(program_gl, binding, UniformValue.infer((1.0, 0.0)))
    assert program_gl.writes == {}


def test_push_skips_unsupported_kind(program_gl):
    binding = UniformBinding("u_matrix", 4, None)

    assert not push_uniform(program_gl, binding, UniformValue.infer(1.0))
