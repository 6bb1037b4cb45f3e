# shaderbox/compiler/fullscreen.py
"""
Fixed vertex stage for fullscreen fragment shaders.

A single triangle with vertices (-1, -1), (3, -1), (-1, 3) is generated
from gl_VertexID alone. Its interior contains the whole [-1, 1] clip
rectangle, so no vertex buffer is needed: drawing 3 vertices from an empty
vertex array covers the viewport.
"""

VERTEX_SHADER_SOURCE = """#version 300 es
void main() {
  float x = -1.0 + float((gl_VertexID & 1) << 2);
  float y = -1.0 + float((gl_VertexID >> 1) << 2);
  gl_Position = vec4(x, y, 0.0, 1.0);
}
"""

FULLSCREEN_VERTEX_COUNT = 3


def fullscreen_triangle_vertices() -> tuple[tuple[float, float], ...]:
    """Clip-space positions produced by VERTEX_SHADER_SOURCE, in vertex order."""
    verts = []
    for vertex_id in range(FULLSCREEN_VERTEX_COUNT):
        x = -1.0 + float((vertex_id & 1) << 2)
        y = -1.0 + float((vertex_id >> 1) << 2)
        verts.append((x, y))
    return tuple(verts)
