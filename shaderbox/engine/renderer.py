# shaderbox/engine/renderer.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from shaderbox.compiler.diagnostics import CompileDiagnostic
from shaderbox.compiler.fullscreen import FULLSCREEN_VERTEX_COUNT
from shaderbox.compiler.pipeline import CompiledProgram, CompileResult, build_program
from shaderbox.engine.fps import FrameRateMeter
from shaderbox.errors import DeviceLostError, InitError
from shaderbox.events import (
    CompileFinished,
    ContextLost,
    ContextRestored,
    EventManager,
    FrameRateSampled,
)
from shaderbox.gl.backend import GLBackend, UniformBinding
from shaderbox.host.scheduler import FrameScheduler
from shaderbox.host.surface import (
    CONTEXT_LOST,
    CONTEXT_RESTORED,
    ContextEvent,
    Surface,
)
from shaderbox.settings import BUILTIN_UNIFORMS, EngineSettings
from shaderbox.types import PointerPosition, Resolution, UniformInput
from shaderbox.uniforms.values import UniformValue, push_uniform

log = logging.getLogger(__name__)


class EngineState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    COMPILING = "compiling"
    LOST = "lost"
    DESTROYED = "destroyed"


@dataclass(slots=True)
class CustomUniform:
    value: UniformValue
    binding: Optional[UniformBinding] = None


class RenderEngine:
    """
    Live renderer for a single fullscreen fragment shader.

    Owns the surface's GL context, the current program and every uniform
    value. One instance per surface; unusable after destroy().

    Typical use:
        engine = RenderEngine()
        if engine.init(surface):
            result = engine.compile(source)
            engine.start_loop()
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        *,
        scheduler: Optional[FrameScheduler] = None,
        events: Optional[EventManager] = None,
    ):
        self.settings = settings or EngineSettings()
        self._scheduler = scheduler or FrameScheduler()
        self._events = events

        self._state = EngineState.UNINITIALIZED
        self._surface: Optional[Surface] = None
        self._gl: Optional[GLBackend] = None

        self._program: Optional[CompiledProgram] = None
        self._active: Dict[str, UniformBinding] = {}
        self._vao = 0

        self._custom: Dict[str, CustomUniform] = {}
        self._pointer: PointerPosition = (0.0, 0.0)
        self._last_source: Optional[str] = None
        self._last_good_source: Optional[str] = None

        self._frame_handle: Optional[int] = None
        self._start_time = 0.0
        self._resume_loop = False
        self._fps = FrameRateMeter(interval=self.settings.frame_rate_interval)

    # -- properties --------------------------------------------------------
    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def is_lost(self) -> bool:
        return self._state is EngineState.LOST

    @property
    def has_program(self) -> bool:
        return self._program is not None

    @property
    def is_running(self) -> bool:
        return self._frame_handle is not None

    @property
    def surface(self) -> Optional[Surface]:
        return self._surface

    @property
    def last_source(self) -> Optional[str]:
        return self._last_source

    @property
    def last_good_source(self) -> Optional[str]:
        """The most recent source that compiled and linked."""
        return self._last_good_source

    @property
    def pointer_position(self) -> PointerPosition:
        return self._pointer

    @property
    def frame_rate(self) -> Optional[int]:
        return self._fps.last_sample

    @property
    def custom_uniforms(self) -> Mapping[str, UniformValue]:
        return MappingProxyType({name: u.value for name, u in self._custom.items()})

    def binding_for(self, name: str) -> Optional[UniformBinding]:
        """The resolved binding for a uniform name in the current program."""
        return self._active.get(name)

    # -- lifecycle ---------------------------------------------------------
    def init(self, surface: Surface) -> bool:
        """
        Bind to a surface and create the draw geometry.

        Returns False if the surface cannot provide a GL context; that is
        final for this engine and is not retried.
        """
        if self._state is not EngineState.UNINITIALIZED:
            log.warning("init() called on a %s engine", self._state.value)
            return False

        gl = surface.get_context()
        if gl is None:
            log.error("%s", InitError("No GL context available for this surface"))
            return False

        self._surface = surface
        self._gl = gl

        surface.add_event_listener(CONTEXT_LOST, self._on_context_lost)
        surface.add_event_listener(CONTEXT_RESTORED, self._on_context_restored)

        gl.reset_state()
        self._vao = gl.create_vertex_array()
        self._state = EngineState.READY
        log.info("Render engine ready (%dx%d)", surface.width, surface.height)
        return True

    def destroy(self) -> None:
        """
        Release every GPU resource and give the context back to the host.
        """
        if self._state is EngineState.DESTROYED:
            return

        self.stop_loop()
        self._resume_loop = False

        gl = self._gl
        if gl is not None and self._state is EngineState.READY:
            self._release_program()
            if self._vao:
                gl.delete_vertex_array(self._vao)
                self._vao = 0

        surface = self._surface
        if surface is not None:
            surface.remove_event_listener(CONTEXT_LOST, self._on_context_lost)
            surface.remove_event_listener(CONTEXT_RESTORED, self._on_context_restored)
            # Forcing a loss lets the host reclaim GPU memory right away.
            surface.lose_context()

        self._state = EngineState.DESTROYED
        self._gl = None
        self._surface = None
        self._program = None
        self._active = {}
        self._custom.clear()
        log.info("Render engine destroyed")

    # -- compile -----------------------------------------------------------
    def compile(self, source: str) -> CompileResult:
        """
        Compile a fragment shader and make it current if it links.

        A failed compile leaves the previous program rendering. The source
        is remembered either way so a context restore can rebuild it.
        """
        self._last_source = source

        if self._state is EngineState.LOST:
            result = CompileResult.failure(
                [CompileDiagnostic(0, "GL context lost; will compile on restore")],
                DeviceLostError("GL context lost"),
            )
        elif self._gl is None or self._state is not EngineState.READY:
            result = CompileResult.failure(
                [CompileDiagnostic(0, "GL context not initialised")],
                InitError("GL context not initialised"),
            )
        else:
            result = self._compile_current(self._gl, source)

        if self._events is not None:
            self._events.emit(CompileFinished(result))
        return result

    def _compile_current(self, gl: GLBackend, source: str) -> CompileResult:
        self._state = EngineState.COMPILING
        try:
            build = build_program(gl, source)
        finally:
            if self._state is EngineState.COMPILING:
                self._state = EngineState.READY

        if not build.success or build.compiled is None:
            log.warning("Shader rejected: %s", build.error)
            return CompileResult.failure(build.diagnostics, build.error)

        self._install(gl, build.compiled)
        self._last_good_source = source
        return CompileResult.ok()

    def _install(self, gl: GLBackend, compiled: CompiledProgram) -> None:
        self._release_program()
        self._program = compiled
        self._active = gl.active_uniforms(compiled.program)

        for name, entry in self._custom.items():
            entry.binding = self._active.get(name)
            if entry.binding is None:
                log.debug("Custom uniform %s is not active in the new program", name)

        log.info(
            "Program %d installed with %d active uniform(s)",
            compiled.program,
            len(self._active),
        )

    def _release_program(self) -> None:
        if self._program is not None and self._gl is not None:
            self._program.release(self._gl)
        self._program = None
        self._active = {}

    # -- uniforms and input ------------------------------------------------
    def set_custom_uniform(self, name: str, value: UniformInput) -> None:
        """
        Insert or replace a custom uniform value.

        The binding is resolved right away; an unknown name is kept and
        simply not uploaded.
        """
        uniform_value = UniformValue.infer(value)
        self._custom[name] = CustomUniform(
            value=uniform_value, binding=self._active.get(name)
        )

    def set_pointer_position(self, x: float, y: float) -> None:
        """Pointer in device pixels, origin at the bottom-left corner."""
        self._pointer = (float(x), float(y))

    def resize(self, width: int, height: int) -> None:
        if self._surface is None or self._state is EngineState.DESTROYED:
            return

        self._surface.resize(width, height)
        if self._gl is not None and self._state is EngineState.READY:
            self._gl.viewport(0, 0, int(width), int(height))

    # -- drawing -----------------------------------------------------------
    def render_frame(
        self,
        elapsed: float,
        resolution: Resolution,
        pointer: PointerPosition,
    ) -> None:
        if self._program is None or self._gl is None:
            return
        if self._state is not EngineState.READY:
            return

        gl = self._gl
        width, height = resolution

        gl.viewport(0, 0, int(width), int(height))
        gl.clear(*self.settings.clear_color)
        gl.use_program(self._program.program)

        self._push_builtin(BUILTIN_UNIFORMS.resolution, (float(width), float(height)))
        self._push_builtin(BUILTIN_UNIFORMS.time, float(elapsed))
        self._push_builtin(BUILTIN_UNIFORMS.pointer, (float(pointer[0]), float(pointer[1])))

        for entry in self._custom.values():
            push_uniform(gl, entry.binding, entry.value)

        gl.draw_triangles(self._vao, FULLSCREEN_VERTEX_COUNT)

    def _push_builtin(self, name: str, value: UniformInput) -> None:
        binding = self._active.get(name)
        if binding is not None:
            assert self._gl is not None
            push_uniform(self._gl, binding, UniformValue.infer(value))

    # -- frame loop --------------------------------------------------------
    def start_loop(self) -> None:
        """
        Render continuously, once per display refresh.

        No-op if the loop is already running. Restarting resets the
        animation clock to zero.
        """
        if self._frame_handle is not None:
            return
        if self._state is not EngineState.READY:
            log.debug("start_loop() ignored while %s", self._state.value)
            return

        self._start_time = self._scheduler.now()
        self._fps.reset()
        self._frame_handle = self._scheduler.request_frame(self._tick)

    def stop_loop(self) -> None:
        if self._frame_handle is not None:
            self._scheduler.cancel_frame(self._frame_handle)
            self._frame_handle = None

    def _tick(self, timestamp: float) -> None:
        self._frame_handle = None
        if self._state is not EngineState.READY or self._surface is None:
            return

        self.render_frame(timestamp - self._start_time, self._surface.size, self._pointer)

        sample = self._fps.frame(timestamp)
        if sample is not None and self._events is not None:
            self._events.emit(FrameRateSampled(sample))

        self._frame_handle = self._scheduler.request_frame(self._tick)

    # -- context loss ------------------------------------------------------
    def _on_context_lost(self, event: ContextEvent) -> None:
        event.prevent_default()

        self._resume_loop = self._frame_handle is not None
        self.stop_loop()
        self._state = EngineState.LOST

        # Every handle died with the context; none may be released again.
        self._program = None
        self._active = {}
        self._vao = 0
        for entry in self._custom.values():
            entry.binding = None

        log.warning("GL context lost; rendering paused")
        if self._events is not None:
            self._events.emit(ContextLost())

    def _rebuild(self, gl: GLBackend) -> None:
        """
        Recompile after a restore.

        The last submitted source is tried first. If it does not build, the
        last good one is, so the picture from before the loss comes back.
        """
        if self._last_source is None:
            return

        result = self.compile(self._last_source)
        good = self._last_good_source
        if result.success or good is None or good == self._last_source:
            return

        log.info("Last source does not build; restoring the last good program")
        fallback = self._compile_current(gl, good)
        if self._events is not None:
            self._events.emit(CompileFinished(fallback))

    def _on_context_restored(self, event: ContextEvent) -> None:
        if self._state is not EngineState.LOST or self._surface is None:
            return

        gl = self._surface.get_context()
        if gl is None:
            log.error("Context restored but no backend is available")
            return

        self._gl = gl
        self._state = EngineState.READY
        gl.reset_state()
        self._vao = gl.create_vertex_array()
        log.info("GL context restored")

        self._rebuild(gl)

        if self._events is not None:
            self._events.emit(ContextRestored())

        if self._resume_loop:
            # Resume without resetting the clock so the animation continues.
            self._resume_loop = False
            self._frame_handle = self._scheduler.request_frame(self._tick)
