"""tbk-scaffold -- generate TypeScript/Express backend projects from presets."""

__version__ = "0.1.0"
