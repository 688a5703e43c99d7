"""Static export — write a build to disk, plus sitemap.xml."""

from tinydocs.export.static import ExportedFile, ExportResult, StaticExporter

__all__ = ["ExportResult", "ExportedFile", "StaticExporter"]
