# shaderbox/engine/__init__.py
from shaderbox.engine.fps import FrameRateMeter
from shaderbox.engine.renderer import CustomUniform, EngineState, RenderEngine

__all__ = ["CustomUniform", "EngineState", "FrameRateMeter", "RenderEngine"]
