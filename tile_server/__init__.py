"""
Tile Server — serves a configured provider chain over HTTP.

- /tiles/{z}/{x}/{y}.{pbf|mvt|png|jpg|webp} returns tile bytes (extension must match the source type); requests above the source's max zoom
  are answered with the ancestor tile (X-Tile-Source header names it)
- /metadata, /health
"""
