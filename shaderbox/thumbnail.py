# shaderbox/thumbnail.py
from __future__ import annotations

import base64
import io
import logging
from typing import Callable, Optional

from shaderbox.engine.renderer import RenderEngine
from shaderbox.host.offscreen import OffscreenSurface
from shaderbox.host.surface import Surface
from shaderbox.settings import THUMBNAIL_SIZE, THUMBNAIL_TIME, SurfaceSettings

log = logging.getLogger(__name__)

SurfaceFactory = Callable[[SurfaceSettings], Surface]


def capture_thumbnail(
    source: str,
    *,
    size: int = THUMBNAIL_SIZE,
    time: float = THUMBNAIL_TIME,
    surface_factory: SurfaceFactory = OffscreenSurface,
) -> Optional[bytes]:
    """
    Render one frame of a fragment shader and return it as PNG bytes.

    Returns None if no context is available or the shader does not compile.
    """
    settings = SurfaceSettings(
        width=size,
        height=size,
        title="thumbnail",
        preserve_drawing_buffer=True,
    )
    surface = surface_factory(settings)
    engine = RenderEngine()

    if not engine.init(surface):
        surface.close()
        return None

    try:
        result = engine.compile(source)
        if not result.success:
            log.info("Thumbnail skipped, shader does not compile: %s", result.error)
            return None

        engine.render_frame(time, surface.size, (0.0, 0.0))

        buffer = io.BytesIO()
        surface.to_image().save(buffer, format="PNG")
        return buffer.getvalue()
    finally:
        engine.destroy()
        surface.close()


def capture_thumbnail_data_url(source: str, **kwargs) -> Optional[str]:
    """Same as capture_thumbnail, encoded as a data:image/png URL."""
    png = capture_thumbnail(source, **kwargs)
    if png is None:
        return None
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")
