# shaderbox/gl/opengl.py
from __future__ import annotations

from typing import Dict, Sequence

from OpenGL import GL

from shaderbox.gl.backend import GLBackend, StageKind, UniformBinding

_STAGE_TYPES = {
    StageKind.VERTEX: GL.GL_VERTEX_SHADER,
    StageKind.FRAGMENT: GL.GL_FRAGMENT_SHADER,
}

_UNIFORM_KINDS = {
    GL.GL_FLOAT: "float",
    GL.GL_INT: "int",
    GL.GL_FLOAT_VEC2: "vec2",
    GL.GL_FLOAT_VEC3: "vec3",
    GL.GL_FLOAT_VEC4: "vec4",
}


def _decode(log) -> str:
    if isinstance(log, bytes):
        return log.decode("utf-8", errors="replace")
    return log or ""


class OpenGLBackend(GLBackend):
    """
    GLBackend over PyOpenGL.

    Talks to whatever context is current on this thread; the surface that
    owns the context is responsible for making it current.
    """

    def create_shader(self, kind: StageKind) -> int:
        return int(GL.glCreateShader(_STAGE_TYPES[kind]))

    def compile_shader(self, shader: int, source: str) -> bool:
        GL.glShaderSource(shader, source)
        GL.glCompileShader(shader)
        return bool(GL.glGetShaderiv(shader, GL.GL_COMPILE_STATUS))

    def shader_info_log(self, shader: int) -> str:
        return _decode(GL.glGetShaderInfoLog(shader))

    def delete_shader(self, shader: int) -> None:
        GL.glDeleteShader(shader)

    def create_program(self) -> int:
        return int(GL.glCreateProgram())

    def link_program(self, program: int, shaders: Sequence[int]) -> bool:
        for shader in shaders:
            GL.glAttachShader(program, shader)
        GL.glLinkProgram(program)
        return bool(GL.glGetProgramiv(program, GL.GL_LINK_STATUS))

    def program_info_log(self, program: int) -> str:
        return _decode(GL.glGetProgramInfoLog(program))

    def delete_program(self, program: int) -> None:
        GL.glDeleteProgram(program)

    def active_uniforms(self, program: int) -> Dict[str, UniformBinding]:
        bindings: Dict[str, UniformBinding] = {}
        count = GL.glGetProgramiv(program, GL.GL_ACTIVE_UNIFORMS)
        for index in range(count):
            raw_name, _size, gl_type = GL.glGetActiveUniform(program, index)
            name = _decode(raw_name)
            # Arrays report as "name[0]"; only the base element is addressable.
            name = name.split("[", 1)[0]
            location = GL.glGetUniformLocation(program, name)
            if location < 0:
                continue
            bindings[name] = UniformBinding(
                name=name,
                location=int(location),
                kind=_UNIFORM_KINDS.get(gl_type),
            )
        return bindings

    def use_program(self, program: int) -> None:
        GL.glUseProgram(program)

    def uniform_float(self, location: int, components: Sequence[float]) -> None:
        n = len(components)
        if n == 1:
            GL.glUniform1f(location, components[0])
        elif n == 2:
            GL.glUniform2f(location, *components)
        elif n == 3:
            GL.glUniform3f(location, *components)
        elif n == 4:
            GL.glUniform4f(location, *components)
        else:
            raise ValueError(f"Unsupported uniform component count: {n}")

    def uniform_int(self, location: int, value: int) -> None:
        GL.glUniform1i(location, value)

    def create_vertex_array(self) -> int:
        return int(GL.glGenVertexArrays(1))

    def delete_vertex_array(self, vao: int) -> None:
        GL.glDeleteVertexArrays(1, [vao])

    def reset_state(self) -> None:
        GL.glDisable(GL.GL_DEPTH_TEST)
        GL.glDisable(GL.GL_STENCIL_TEST)
        GL.glDisable(GL.GL_BLEND)

    def viewport(self, x: int, y: int, width: int, height: int) -> None:
        GL.glViewport(x, y, width, height)

    def clear(self, r: float, g: float, b: float, a: float) -> None:
        GL.glClearColor(r, g, b, a)
        GL.glClear(GL.GL_COLOR_BUFFER_BIT)

    def draw_triangles(self, vao: int, count: int) -> None:
        GL.glBindVertexArray(vao)
        GL.glDrawArrays(GL.GL_TRIANGLES, 0, count)
        GL.glBindVertexArray(0)
