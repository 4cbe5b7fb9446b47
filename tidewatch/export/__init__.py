"""Tidewatch export: the current scene as D3 JSON or CSV."""

from tidewatch.export.scene import SceneExporter

__all__ = ["SceneExporter"]
