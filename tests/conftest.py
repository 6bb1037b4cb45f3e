import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from PIL import Image

from shaderbox.engine.renderer import RenderEngine
from shaderbox.events import EventManager
from shaderbox.gl.backend import GLBackend, StageKind, UniformBinding
from shaderbox.host.scheduler import FrameScheduler
from shaderbox.host.surface import Surface
from shaderbox.settings import SurfaceSettings

VALID_SOURCE = """#version 300 es
precision highp float;
uniform vec2 u_resolution;
uniform float u_time;
uniform vec2 u_mouse;
uniform float u_scale; // range: 1.0, 10.0, default: 4.0
uniform vec3 u_color;
uniform float u_unused;
out vec4 fragColor;
void main() {
  vec2 uv = gl_FragCoord.xy / u_resolution;
  float d = length(uv - u_mouse / u_resolution);
  fragColor = vec4(u_color * sin(d * u_scale + u_time), 1.0);
}
"""

# Same picture, no custom uniforms at all.
PLAIN_SOURCE = """#version 300 es
precision highp float;
uniform vec2 u_resolution;
out vec4 fragColor;
void main() {
  fragColor = vec4(gl_FragCoord.xy / u_resolution, 0.0, 1.0);
}
"""

NO_PRECISION_SOURCE = """#version 300 es
uniform float u_time;
out vec4 fragColor;
void main() {
  fragColor = vec4(u_time);
}
"""

NO_MAIN_SOURCE = """#version 300 es
precision highp float;
out vec4 fragColor;
void helper() {
  fragColor = vec4(1.0);
}
"""

_UNIFORM_DECL = re.compile(r"\buniform\s+(\w+)\s+(\w+)\s*;")
_KNOWN_KINDS = {"float", "int", "vec2", "vec3", "vec4"}


class ManualClock:
    """Deterministic stand-in for time.perf_counter."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


@dataclass
class FakeShader:
    kind: StageKind
    source: str = ""
    log: str = ""
    compiled: bool = False


@dataclass
class FakeProgram:
    shaders: Tuple[int, ...] = ()
    log: str = ""
    linked: bool = False
    uniforms: Dict[str, UniformBinding] = field(default_factory=dict)


def _fake_compile_log(kind: StageKind, source: str) -> str:
    """Emulates the handful of GLSL ES errors the tests need."""
    errors: List[str] = []
    lines = source.splitlines()

    if kind is StageKind.FRAGMENT and "precision " not in source:
        line = next((i for i, text in enumerate(lines, 1) if "float" in text), 1)
        errors.append(f"ERROR: 0:{line}: 'float' : precision qualifier required")

    for i, text in enumerate(lines, 1):
        if text.strip().startswith("#error"):
            message = text.strip()[len("#error"):].strip()
            errors.append(f"ERROR: 0:{i}: '#error' : {message}")

    return "\n".join(errors)


class FakeGL(GLBackend):
    """
    In-memory GL driver.

    Tracks every object so tests can check for leaks, emulates
    optimizer stripping of unused uniforms, and fails loudly on any call
    made while the context is lost or on a double delete.
    """

    def __init__(self):
        self.lost = False
        self.fail_allocation = False
        self.shaders: Dict[int, FakeShader] = {}
        self.programs: Dict[int, FakeProgram] = {}
        self.vertex_arrays: set[int] = set()
        self.current_program = 0
        self.writes: Dict[Tuple[int, int], object] = {}
        self.draws: List[Tuple[int, int, int]] = []
        self.clears: List[Tuple[float, float, float, float]] = []
        self.viewports: List[Tuple[int, int, int, int]] = []
        self.state_resets = 0
        self.deleted_shaders: List[int] = []
        self.deleted_programs: List[int] = []
        self.deleted_vertex_arrays: List[int] = []
        self._next_handle = 1

    # -- test helpers ------------------------------------------------------
    def _check(self) -> None:
        if self.lost:
            raise AssertionError("GL call while the context is lost")

    def _handle(self) -> int:
        handle = self._next_handle
        self._next_handle += 1
        return handle

    def lose(self) -> None:
        self.lost = True
        self.shaders.clear()
        self.programs.clear()
        self.vertex_arrays.clear()
        self.current_program = 0

    def restore(self) -> None:
        self.lost = False

    def live_objects(self) -> int:
        return len(self.shaders) + len(self.programs)

    def written(self, name: str, program: Optional[int] = None) -> object:
        """Last value uploaded to `name` in a program (current by default)."""
        program = program or self.current_program
        binding = self.programs[program].uniforms.get(name)
        if binding is None:
            return None
        return self.writes.get((program, binding.location))

    # -- stages ------------------------------------------------------------
    def create_shader(self, kind: StageKind) -> int:
        self._check()
        if self.fail_allocation:
            return 0
        handle = self._handle()
        self.shaders[handle] = FakeShader(kind)
        return handle

    def compile_shader(self, shader: int, source: str) -> bool:
        self._check()
        fake = self.shaders[shader]
        fake.source = source
        fake.log = _fake_compile_log(fake.kind, source)
        fake.compiled = not fake.log
        return fake.compiled

    def shader_info_log(self, shader: int) -> str:
        self._check()
        return self.shaders[shader].log

    def delete_shader(self, shader: int) -> None:
        self._check()
        if shader not in self.shaders:
            raise AssertionError(f"delete of unknown shader {shader}")
        del self.shaders[shader]
        self.deleted_shaders.append(shader)

    # -- programs ----------------------------------------------------------
    def create_program(self) -> int:
        self._check()
        if self.fail_allocation:
            return 0
        handle = self._handle()
        self.programs[handle] = FakeProgram()
        return handle

    def link_program(self, program: int, shaders: Sequence[int]) -> bool:
        self._check()
        fake = self.programs[program]
        fake.shaders = tuple(shaders)
        stages = [self.shaders[s] for s in shaders]

        if not all(s.compiled for s in stages):
            fake.log = "ERROR: One or more attached shaders not successfully compiled"
            return False

        fragment = next(s for s in stages if s.kind is StageKind.FRAGMENT)
        if "void main" not in fragment.source:
            fake.log = "error: fragment shader lacks `main'"
            return False

        location = 0
        for type_, name in _UNIFORM_DECL.findall(fragment.source):
            if len(re.findall(rf"\b{name}\b", fragment.source)) < 2:
                continue  # declared, never read: stripped by the optimizer
            fake.uniforms[name] = UniformBinding(
                name=name,
                location=location,
                kind=type_ if type_ in _KNOWN_KINDS else None,
            )
            location += 1

        fake.linked = True
        return True

    def program_info_log(self, program: int) -> str:
        self._check()
        return self.programs[program].log

    def delete_program(self, program: int) -> None:
        self._check()
        if program not in self.programs:
            raise AssertionError(f"delete of unknown program {program}")
        del self.programs[program]
        self.deleted_programs.append(program)
        if self.current_program == program:
            self.current_program = 0

    def active_uniforms(self, program: int) -> Dict[str, UniformBinding]:
        self._check()
        return dict(self.programs[program].uniforms)

    def use_program(self, program: int) -> None:
        self._check()
        assert self.programs[program].linked
        self.current_program = program

    # -- uniforms ----------------------------------------------------------
    def uniform_float(self, location: int, components: Sequence[float]) -> None:
        self._check()
        assert self.current_program, "uniform upload with no program in use"
        values = tuple(components)
        self.writes[(self.current_program, location)] = (
            values[0] if len(values) == 1 else values
        )

    def uniform_int(self, location: int, value: int) -> None:
        self._check()
        assert self.current_program, "uniform upload with no program in use"
        assert isinstance(value, int)
        self.writes[(self.current_program, location)] = value

    # -- geometry and frame state ------------------------------------------
    def create_vertex_array(self) -> int:
        self._check()
        handle = self._handle()
        self.vertex_arrays.add(handle)
        return handle

    def delete_vertex_array(self, vao: int) -> None:
        self._check()
        self.vertex_arrays.remove(vao)
        self.deleted_vertex_arrays.append(vao)

    def reset_state(self) -> None:
        self._check()
        self.state_resets += 1

    def viewport(self, x: int, y: int, width: int, height: int) -> None:
        self._check()
        self.viewports.append((x, y, width, height))

    def clear(self, r: float, g: float, b: float, a: float) -> None:
        self._check()
        self.clears.append((r, g, b, a))

    def draw_triangles(self, vao: int, count: int) -> None:
        self._check()
        assert vao in self.vertex_arrays
        self.draws.append((self.current_program, vao, count))


class FakeSurface(Surface):
    def __init__(self, settings: Optional[SurfaceSettings] = None, *, available: bool = True):
        super().__init__(settings or SurfaceSettings(width=320, height=240))
        self.available = available
        self.gl = FakeGL()
        self.acquired = 0

    def _acquire_device(self) -> GLBackend:
        if not self.available:
            raise RuntimeError("no GL driver")
        self.gl.restore()
        self.acquired += 1
        return self.gl

    def _release_device(self) -> None:
        self.gl.lose()

    def _read_pixels(self) -> Image.Image:
        shade = 255 if self.gl.draws else 0
        return Image.new("RGBA", self.size, (shade, 0, 0, 255))


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return FrameScheduler(clock=clock)


@pytest.fixture
def events():
    return EventManager()


@pytest.fixture
def surface():
    return FakeSurface()


@pytest.fixture
def gl(surface):
    return surface.gl


@pytest.fixture
def engine(surface, scheduler, events):
    """Returns an initialised engine on a fresh FakeSurface."""
    engine = RenderEngine(scheduler=scheduler, events=events)
    assert engine.init(surface)
    return engine
