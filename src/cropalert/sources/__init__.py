"""Event source registry: maps source_type → lazy-import class path."""

AVAILABLE_SOURCES: dict[str, str] = {
    "weather": "cropalert.sources.simulated.SimulatedWeatherSource",
    "price": "cropalert.sources.simulated.SimulatedPriceSource",
    "seasonal": "cropalert.sources.simulated.SimulatedSeasonalSource",
    "government": "cropalert.sources.simulated.SimulatedGovernmentSource",
}


def import_source(dotted_path: str):
    """Import a source class from its dotted module path."""
    import importlib

    module_path, class_name = dotted_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
