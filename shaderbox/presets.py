# shaderbox/presets.py
"""
Starter fragment shaders.

All of them target GLSL ES 3.00 and use the engine's built-in uniforms.
Some declare custom uniforms with hint comments so the viewer has
something to discover.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Preset:
    name: str
    source: str


DEFAULT_FRAGMENT_SHADER = """#version 300 es
precision highp float;
uniform vec2 u_resolution;
uniform float u_time;
out vec4 fragColor;
void main() {
  vec2 uv = gl_FragCoord.xy / u_resolution;
  fragColor = vec4(uv, 0.5 + 0.5 * sin(u_time), 1.0);
}
"""

_PLASMA = """#version 300 es
precision highp float;

uniform vec2 u_resolution;
uniform float u_time;

uniform float u_scale; // range: 1.0, 30.0, default: 10.0, step: 0.5
uniform float u_speed; // range: 0.0, 4.0, default: 1.0

out vec4 fragColor;

void main() {
    vec2 uv = gl_FragCoord.xy / u_resolution;
    float t = u_time * u_speed;

    float v = sin(uv.x * u_scale + t)
            + sin(uv.y * u_scale + t)
            + sin((uv.x + uv.y) * u_scale + t)
            + sin(length(uv) * u_scale + t);
    v *= 0.25;

    fragColor = vec4(
        sin(v * 3.14159),
        sin(v * 3.14159 + 2.094),
        sin(v * 3.14159 + 4.189),
        1.0
    );
}
"""

_VORONOI = """#version 300 es
precision highp float;

uniform vec2 u_resolution;
uniform float u_time;
uniform vec2 u_mouse;

uniform float u_cells; // range: 2.0, 20.0, default: 8.0, step: 1.0
uniform vec3 u_edgeColor; // default: 0.1, 0.1, 0.15

out vec4 fragColor;

vec2 hash2(vec2 p) {
    p = vec2(dot(p, vec2(127.1, 311.7)), dot(p, vec2(269.5, 183.3)));
    return fract(sin(p) * 43758.5453);
}

void main() {
    vec2 uv = gl_FragCoord.xy / u_resolution.y;
    vec2 p = uv * u_cells;
    vec2 cell = floor(p);
    vec2 local = fract(p);

    float nearest = 8.0;
    float second = 8.0;
    for (int y = -1; y <= 1; y++) {
        for (int x = -1; x <= 1; x++) {
            vec2 offset = vec2(float(x), float(y));
            vec2 point = hash2(cell + offset);
            point = 0.5 + 0.5 * sin(u_time + 6.2831 * point);
            float d = length(offset + point - local);
            if (d < nearest) {
                second = nearest;
                nearest = d;
            } else if (d < second) {
                second = d;
            }
        }
    }

    float glow = 1.0 - smoothstep(0.0, 0.3, length(gl_FragCoord.xy - u_mouse) / u_resolution.y);
    vec3 col = vec3(nearest) + glow * 0.3;
    col = mix(u_edgeColor, col, smoothstep(0.0, 0.05, second - nearest));
    fragColor = vec4(col, 1.0);
}
"""

_WAVES = """#version 300 es
precision highp float;

uniform vec2 u_resolution;
uniform float u_time;

uniform vec3 u_color; // default: 0.2, 0.6, 1.0
uniform vec2 u_frequency; // range: 0.0, 20.0, default: 6.0, 3.0
uniform int u_layers; // range: 1, 8, default: 4

out vec4 fragColor;

void main() {
    vec2 uv = gl_FragCoord.xy / u_resolution;
    float intensity = 0.0;

    for (int i = 0; i < 8; i++) {
        if (i >= u_layers) break;
        float fi = float(i);
        float wave = sin(uv.x * u_frequency.x + u_time * (1.0 + fi * 0.3) + fi)
                   * 0.1 / (1.0 + fi);
        float line = 0.5 + wave + (fi - float(u_layers) * 0.5) * 0.05;
        intensity += 0.004 / abs(uv.y - line + 0.02 * sin(uv.x * u_frequency.y));
    }

    fragColor = vec4(u_color * intensity, 1.0);
}
"""

PRESETS: Tuple[Preset, ...] = (
    Preset("Gradient", DEFAULT_FRAGMENT_SHADER),
    Preset("Plasma", _PLASMA),
    Preset("Voronoi", _VORONOI),
    Preset("Waves", _WAVES),
)


def get_preset(name: str) -> Preset:
    """Look up a preset by name, case-insensitively."""
    for preset in PRESETS:
        if preset.name.lower() == name.lower():
            return preset
    raise KeyError(f"Unknown preset: {name}")
