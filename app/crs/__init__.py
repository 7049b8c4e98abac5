"""CRS model and Well-Known-Text support.

Modules:
 - model: immutable coordinate system value objects and well-known constants
 - parameters: projection parameter sets and the builder used while parsing
 - wkt_tokenizer / wkt_reader / wkt_writer: WKT text <-> model objects
 - catalog: batch loading of `srid;wkt` catalogs
 - diagnostics: JSON-friendly summaries of systems and transform pipelines
 - errors: the engine's exception taxonomy
"""

__all__ = [
    "model",
    "parameters",
    "wkt_reader",
    "wkt_writer",
    "catalog",
    "diagnostics",
    "errors",
]
