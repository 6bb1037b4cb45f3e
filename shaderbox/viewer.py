# shaderbox/viewer.py
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Mapping, Optional

import pygame

from shaderbox.compiler.pipeline import CompileResult
from shaderbox.engine.renderer import RenderEngine
from shaderbox.events import (
    CompileFinished,
    ContextLost,
    ContextRestored,
    EventManager,
    FrameRateSampled,
)
from shaderbox.host.scheduler import FrameScheduler
from shaderbox.host.window import WindowSurface
from shaderbox.settings import ViewerSettings
from shaderbox.types import UniformInput
from shaderbox.uniforms.discovery import discover_uniforms

log = logging.getLogger(__name__)

QUIT_KEYS = (pygame.K_ESCAPE, pygame.K_q)


class SourceWatcher:
    """
    Polls a shader file and hands back its text once edits settle.

    Every new modification time restarts the debounce window, so a burst
    of saves produces one reload.
    """

    def __init__(
        self,
        path: Path,
        debounce: float = 0.3,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.path = Path(path)
        self.debounce = debounce
        self._clock = clock
        self._mtime: Optional[float] = None
        self._changed_at: Optional[float] = None

    def read(self) -> str:
        self._mtime = self.path.stat().st_mtime
        self._changed_at = None
        return self.path.read_text(encoding="utf-8")

    def poll(self) -> Optional[str]:
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            # Editors that save by rename briefly remove the file.
            return None

        now = self._clock()
        if mtime != self._mtime:
            self._mtime = mtime
            self._changed_at = now
            return None

        if self._changed_at is not None and now - self._changed_at >= self.debounce:
            self._changed_at = None
            return self.path.read_text(encoding="utf-8")
        return None


class Viewer:
    """
    Interactive window around a RenderEngine, live-reloading one file.

    Keys:
        - ESC / Q: quit
        - F: toggle the frame-rate display in the title bar
        - R: restart the animation clock
        - L: simulate a context loss, restored on the next frame
    """

    def __init__(
        self,
        path: Path,
        settings: Optional[ViewerSettings] = None,
        overrides: Optional[Mapping[str, UniformInput]] = None,
    ):
        self.settings = settings or ViewerSettings()
        self.events = EventManager()
        self.scheduler = FrameScheduler()
        self.window = WindowSurface(self.settings.surface)
        self.engine = RenderEngine(
            self.settings.engine, scheduler=self.scheduler, events=self.events
        )
        self.watcher = SourceWatcher(path, debounce=self.settings.reload_debounce)

        self._overrides = dict(overrides or {})
        self._show_fps = self.settings.show_frame_rate
        self._status = "starting"
        self._pending_restore = False
        self.running = False

    def load(self, source: str) -> CompileResult:
        result = self.engine.compile(source)
        if result.success:
            self.apply_discovered_uniforms(source)
        return result

    def apply_discovered_uniforms(self, source: str) -> None:
        """
        Seed newly discovered uniforms with their defaults.

        Values already set (by the user or an earlier compile) are kept;
        command-line overrides always win.
        """
        current = self.engine.custom_uniforms
        for descriptor in discover_uniforms(source):
            if descriptor.name in self._overrides:
                self.engine.set_custom_uniform(
                    descriptor.name, self._overrides[descriptor.name]
                )
            elif descriptor.name not in current:
                self.engine.set_custom_uniform(descriptor.name, descriptor.value)

    def run(self) -> int:
        if not self.engine.init(self.window):
            log.error("OpenGL is not available; cannot open the viewer")
            return 1

        self.load(self.watcher.read())
        self.engine.start_loop()

        clock = pygame.time.Clock()
        self.running = True
        log.info("Watching %s. Press ESC to quit", self.watcher.path)

        try:
            while self.running:
                for event in self.window.poll_events():
                    self.handle_event(event)

                if self._pending_restore:
                    self._pending_restore = False
                    self.window.restore_context()

                source = self.watcher.poll()
                if source is not None:
                    log.info("Reloading %s", self.watcher.path)
                    self.load(source)

                self.scheduler.run_frame()
                self.drain_events()
                self.window.present()
                clock.tick(self.settings.engine.target_fps)
        finally:
            self.engine.destroy()
            self.window.close()
        return 0

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.running = False
        elif event.type == pygame.KEYDOWN:
            if event.key in QUIT_KEYS:
                self.running = False
            elif event.key == pygame.K_f:
                self._show_fps = not self._show_fps
                self._update_caption()
            elif event.key == pygame.K_r:
                self.engine.stop_loop()
                self.engine.start_loop()
            elif event.key == pygame.K_l:
                self.window.lose_context()
                self._pending_restore = True
        elif event.type == pygame.MOUSEMOTION:
            x, y = event.pos
            self.engine.set_pointer_position(x, self.window.height - y)
        elif event.type == pygame.VIDEORESIZE:
            self.engine.resize(event.w, event.h)

    def drain_events(self) -> None:
        for finished in self.events.get(CompileFinished):
            result = finished.result
            if result.success:
                self._status = "compiled"
                log.info("Compiled OK")
            else:
                self._status = f"{len(result.diagnostics)} error(s)"
                for diagnostic in result.diagnostics:
                    log.warning("line %d: %s", diagnostic.line, diagnostic.message)
            self._update_caption()

        if self.events.get(ContextLost):
            self._status = "context lost"
            self._update_caption()
        if self.events.get(ContextRestored):
            self._status = "context restored"
            self._update_caption()

        sample = self.events.latest(FrameRateSampled)
        if sample is not None and self._show_fps:
            self._update_caption()

    def _update_caption(self) -> None:
        parts = [self.settings.surface.title, self.watcher.path.name, self._status]
        if self._show_fps and self.engine.frame_rate is not None:
            parts.append(f"{self.engine.frame_rate} FPS")
        self.window.set_caption(" | ".join(parts))
